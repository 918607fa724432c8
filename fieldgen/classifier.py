"""
Field Classifier

Decides each field's slot (Spec, Status or Ignored) and the resource-wide
singleton flags (primary key, ARN, owner account ID).

Every decision is a `Decision`, tagged heuristic or explicit, so precedence
and provenance can be inspected independently of control flow.

Slot precedence, highest first:
1. is_ignored: true -> Ignored
2. is_read_only -> Status (true) or Spec (false); a `from` redirect
   defaults to Status unless is_read_only is explicitly false
3. Heuristic: member of a Create input -> Spec; member of a Create or
   ReadOne output only -> Status; anything else -> Ignored
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .config import FieldConfig
from .errors import ConflictingOverride
from .schema import (
    HEURISTIC_OVERRIDDEN,
    SINGLETON_MATCH_IGNORED,
    Decision,
    FieldOccurrence,
    Slot,
)
from .shapes import OpType, Role

logger = logging.getLogger(__name__)


STATUS_SOURCE_OP_TYPES = (OpType.CREATE, OpType.READ_ONE)


def heuristic_slot(occurrences: list[FieldOccurrence]) -> Slot:
    """Slot implied by where the field appears."""
    if any(o.role == Role.INPUT and o.op_type == OpType.CREATE for o in occurrences):
        return Slot.SPEC
    if any(o.role == Role.OUTPUT and o.op_type in STATUS_SOURCE_OP_TYPES for o in occurrences):
        return Slot.STATUS
    return Slot.IGNORED


def classify(
    field_name: str,
    occurrences: list[FieldOccurrence],
    override: Optional[FieldConfig] = None,
) -> Decision:
    """
    Decide the field's slot.

    Returns:
        Decision whose value is a Slot
    """
    if override is not None:
        if override.is_ignored:
            return Decision.explicit(Slot.IGNORED)
        if override.is_read_only is not None:
            return Decision.explicit(Slot.STATUS if override.is_read_only else Slot.SPEC)
        if override.source is not None:
            return Decision.explicit(Slot.STATUS)
        if override.is_attribute and not occurrences:
            # Attribute fields live in the attributes map and are user-settable
            return Decision.heuristic(Slot.SPEC)

    slot = heuristic_slot(occurrences)

    if slot == Slot.IGNORED and override is not None and override.is_ignored is False:
        # Explicitly kept: settable if any operation accepts it
        kept = Slot.SPEC if any(o.role == Role.INPUT for o in occurrences) else Slot.STATUS
        return Decision.explicit(kept)

    logger.debug(f"{field_name}: heuristic slot {slot.value}")
    return Decision.heuristic(slot)


def check_slot_constraints(field_name: str, slot: Slot, override: Optional[FieldConfig]) -> None:
    """
    Reject flags that make no sense for the chosen slot. Policy blocks are
    checked by the policy attachers.

    Raises:
        ConflictingOverride: On the first incompatible flag
    """
    if override is None:
        return

    if slot == Slot.IGNORED:
        for flag in ("is_primary_key", "is_arn", "is_owner_account_id"):
            if getattr(override, flag):
                raise ConflictingOverride(field_name, f"ignored field cannot set {flag}")

    if slot == Slot.STATUS:
        if override.is_immutable:
            raise ConflictingOverride(field_name, "is_immutable only applies to Spec fields")
        if override.is_required:
            raise ConflictingOverride(field_name, "is_required only applies to Spec fields")


def decide_required(
    occurrences: list[FieldOccurrence],
    override: Optional[FieldConfig],
    slot: Slot,
) -> Decision:
    """Explicit is_required, else required in a Create input shape."""
    if override is not None and override.is_required is not None:
        return Decision.explicit(override.is_required)
    required = slot == Slot.SPEC and any(
        o.required and o.role == Role.INPUT and o.op_type == OpType.CREATE
        for o in occurrences
    )
    return Decision.heuristic(required)


# ============================================================================
# Singleton flags
# ============================================================================

def primary_key_patterns(resource: str) -> set[str]:
    """Lowercased names treated as the resource's primary key."""
    r = resource.lower()
    return {"name", r, f"{r}name", f"{r}id"}


def arn_patterns(resource: str) -> set[str]:
    """Lowercased names treated as the resource's ARN."""
    return {"arn", f"{resource.lower()}arn"}


@dataclass
class SingletonAssignment:
    """Outcome of assigning a flag that at most one field may carry."""
    flag: str
    owner: Optional[str] = None
    decisions: dict[str, Decision] = field(default_factory=dict)
    # (code, field, message) for informational diagnostics, in order
    notes: list[tuple[str, str, str]] = field(default_factory=list)


def assign_singleton_flag(
    flag: str,
    names: list[str],
    overrides: dict[str, FieldConfig],
    patterns: set[str],
    ineligible: Optional[set[str]] = None,
) -> SingletonAssignment:
    """
    Assign a flag to at most one field.

    An explicit `true` anywhere wins and disables the name heuristic. An
    explicit `false` only removes that field from heuristic matching.
    Otherwise the first name (in declaration order) matching `patterns`
    case-insensitively wins and later matches are noted and ignored.

    Args:
        flag: FieldConfig attribute name, e.g. "is_primary_key"
        names: Field names in declaration order
        overrides: Field overrides keyed by name
        patterns: Lowercased names that match heuristically
        ineligible: Names the heuristic must skip (e.g. Ignored fields)

    Raises:
        ConflictingOverride: If two fields set the flag explicitly
    """
    ineligible = ineligible or set()
    result = SingletonAssignment(flag=flag)

    explicit_true = []
    for name in names:
        value = getattr(overrides[name], flag) if name in overrides else None
        if value is not None:
            result.decisions[name] = Decision.explicit(value)
            if value:
                explicit_true.append(name)

    if len(explicit_true) > 1:
        raise ConflictingOverride(
            explicit_true[1], f"{flag} is already set explicitly on {explicit_true[0]}"
        )

    heuristic_owner = None
    for name in names:
        if name in ineligible or name.lower() not in patterns:
            continue
        if name in result.decisions:
            if not result.decisions[name].value:
                result.notes.append((
                    HEURISTIC_OVERRIDDEN, name,
                    f"{flag} name match disabled by explicit override",
                ))
            continue
        if heuristic_owner is None and not explicit_true:
            heuristic_owner = name
            result.decisions[name] = Decision.heuristic(True)
        elif explicit_true:
            result.notes.append((
                HEURISTIC_OVERRIDDEN, name,
                f"{flag} name match overridden by explicit {flag} on {explicit_true[0]}",
            ))
        else:
            result.notes.append((
                SINGLETON_MATCH_IGNORED, name,
                f"{flag} already assigned to {heuristic_owner}; later name match ignored",
            ))

    for name in names:
        result.decisions.setdefault(name, Decision.heuristic(False))

    result.owner = explicit_true[0] if explicit_true else heuristic_owner
    return result
