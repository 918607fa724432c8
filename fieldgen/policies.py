"""
Policy Attachers

Three independent sub-resolvers that attach optional metadata to a
classified field without touching its type or slot:
- comparison policy (how drift is detected)
- presentation policy (listing columns)
- late-initialization policy (retry bounds for server-defaulted fields)
"""

import logging
from typing import Optional

from .config import FieldConfig
from .errors import ConflictingOverride, InvalidBackoffBounds
from .schema import (
    ComparePolicy,
    LateInitPolicy,
    PresentPolicy,
    PrintColumn,
    ResolvedField,
    Slot,
)

logger = logging.getLogger(__name__)


DEFAULT_COMPARE_POLICY = ComparePolicy()


def _reject_on_ignored(field: ResolvedField, directive: str) -> None:
    if field.slot == Slot.IGNORED:
        raise ConflictingOverride(field.name, f"ignored field cannot carry a `{directive}` policy")


def attach_compare_policy(field: ResolvedField, override: Optional[FieldConfig]) -> ComparePolicy:
    """
    Comparison policy for a field.

    Default: values differ by ordinary equality and nil differs from a
    present zero value. `is_ignored` and `nil_equals_zero_value` may combine.

    Raises:
        ConflictingOverride: compare set on an Ignored field, or
            compare.is_ignored combined with a print column
    """
    if override is None or override.compare is None:
        return DEFAULT_COMPARE_POLICY

    _reject_on_ignored(field, "compare")
    compare = override.compare
    if compare.is_ignored and override.print is not None:
        raise ConflictingOverride(
            field.name, "compare.is_ignored cannot be combined with a `print` column"
        )

    return ComparePolicy(
        is_ignored=compare.is_ignored,
        nil_equals_zero_value=compare.nil_equals_zero_value,
    )


def attach_present_policy(
    field: ResolvedField,
    override: Optional[FieldConfig],
) -> Optional[PresentPolicy]:
    """
    Listing column for a field, or None if it has no `print` override.

    The column header is `print.name` when set, else the field name.

    Raises:
        ConflictingOverride: print set on an Ignored or compare-ignored field
    """
    if override is None or override.print is None:
        return None

    _reject_on_ignored(field, "print")
    if override.compare is not None and override.compare.is_ignored:
        raise ConflictingOverride(
            field.name, "a `print` column cannot be combined with compare.is_ignored"
        )

    printer = override.print
    return PresentPolicy(
        column_name=printer.name or field.name,
        priority=printer.priority,
        index=printer.index,
    )


def attach_late_init_policy(
    field: ResolvedField,
    override: Optional[FieldConfig],
) -> Optional[LateInitPolicy]:
    """
    Late-initialization bounds, or None if not configured.

    Only the bounds are carried; scheduling the retries belongs to the
    reconciliation loop.

    Raises:
        ConflictingOverride: late_initialize on an Ignored or Status field
        InvalidBackoffBounds: negative bounds or max < min
    """
    if override is None or override.late_initialize is None:
        return None

    _reject_on_ignored(field, "late_initialize")
    if field.slot == Slot.STATUS:
        raise ConflictingOverride(field.name, "late_initialize only applies to Spec fields")

    bounds = override.late_initialize
    if bounds.min_backoff_seconds < 0 or bounds.max_backoff_seconds < 0:
        raise InvalidBackoffBounds(
            field.name,
            f"backoff bounds must not be negative (min={bounds.min_backoff_seconds}, "
            f"max={bounds.max_backoff_seconds})",
        )
    if bounds.max_backoff_seconds < bounds.min_backoff_seconds:
        raise InvalidBackoffBounds(
            field.name,
            f"max_backoff_seconds ({bounds.max_backoff_seconds}) is less than "
            f"min_backoff_seconds ({bounds.min_backoff_seconds})",
        )

    return LateInitPolicy(
        min_backoff_seconds=bounds.min_backoff_seconds,
        max_backoff_seconds=bounds.max_backoff_seconds,
    )


def order_columns(fields: list[ResolvedField], order_by: Optional[str] = None) -> tuple[PrintColumn, ...]:
    """
    Listing columns in display order.

    Without ordering, columns follow field declaration order. With
    `order_by: index` they are sorted by ascending index, so the smallest
    index sits right after NAME and the largest right before AGE. A missing
    index counts as 0 and ties keep declaration order.
    """
    printed = sorted(
        (f for f in fields if f.present_policy is not None),
        key=lambda f: f.position,
    )
    if order_by == "index":
        printed.sort(key=lambda f: f.present_policy.index or 0)

    return tuple(
        PrintColumn(
            field=f.name,
            header=f.present_policy.column_name,
            type_name=f.type_name,
            priority=f.present_policy.priority,
        )
        for f in printed
    )
