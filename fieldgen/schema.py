"""
Resolution Schema Definitions

Data models produced by the field resolution engine:
- FieldOccurrence: one appearance of a field name in an operation's shape
- Decision: a value plus whether a heuristic or an explicit override set it
- ResolvedField: the final, immutable resolution of one field
- Diagnostic: an informational, warning or error note from resolution
- ResolvedFieldSet: every resolved field of a resource, plus diagnostics
  and the listing columns
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional

from .shapes import OpType, Role, TypeRef


# ============================================================================
# Enums
# ============================================================================

class Slot(str, Enum):
    """Where a field lives on the generated resource."""
    SPEC = "Spec"
    STATUS = "Status"
    IGNORED = "Ignored"


class Provenance(str, Enum):
    """Who made a decision."""
    HEURISTIC = "heuristic"
    EXPLICIT = "explicit"


class Severity(str, Enum):
    """Severity of a resolution diagnostic."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


# Non-error diagnostic codes
HEURISTIC_OVERRIDDEN = "heuristic_overridden"
MEMBER_DECOMPOSED = "member_decomposed"
FIELD_NOT_IN_RESOURCE_SHAPES = "field_not_in_resource_shapes"
SINGLETON_MATCH_IGNORED = "singleton_match_ignored"

# Fixed listing columns around the per-field ones
NAME_COLUMN = "NAME"
AGE_COLUMN = "AGE"


# ============================================================================
# Lineage
# ============================================================================

@dataclass(frozen=True)
class FieldOccurrence:
    """One appearance of a field name in an operation's input or output."""
    operation: str
    role: Role
    member_name: str
    type: TypeRef
    op_type: OpType = OpType.OTHER
    required: bool = False
    path: str = ""  # Dotted path inside the shape, e.g. "Code.ImageUri"


@dataclass(frozen=True)
class Decision:
    """A decided value and its provenance (heuristic or explicit)."""
    value: Any
    source: Provenance

    @classmethod
    def heuristic(cls, value: Any) -> "Decision":
        return cls(value=value, source=Provenance.HEURISTIC)

    @classmethod
    def explicit(cls, value: Any) -> "Decision":
        return cls(value=value, source=Provenance.EXPLICIT)

    @property
    def is_explicit(self) -> bool:
        return self.source == Provenance.EXPLICIT


# ============================================================================
# Policies
# ============================================================================

@dataclass(frozen=True)
class ComparePolicy:
    """How two resource instances are compared on a field."""
    is_ignored: bool = False
    nil_equals_zero_value: bool = False

    def to_dict(self) -> dict:
        return {
            "is_ignored": self.is_ignored,
            "nil_equals_zero_value": self.nil_equals_zero_value,
        }


@dataclass(frozen=True)
class PresentPolicy:
    """Listing column for a field."""
    column_name: str
    priority: int = 0
    index: Optional[int] = None

    @property
    def is_wide(self) -> bool:
        """Wide-view only columns have priority > 0."""
        return self.priority > 0

    def to_dict(self) -> dict:
        return {
            "column_name": self.column_name,
            "priority": self.priority,
            "index": self.index,
        }


@dataclass(frozen=True)
class LateInitPolicy:
    """Retry bounds for late initialization, consumed by the reconciler."""
    min_backoff_seconds: int
    max_backoff_seconds: int

    def to_dict(self) -> dict:
        return {
            "min_backoff_seconds": self.min_backoff_seconds,
            "max_backoff_seconds": self.max_backoff_seconds,
        }


# ============================================================================
# Resolved output
# ============================================================================

@dataclass(frozen=True)
class ResolvedField:
    """
    Final resolution of one resource field.

    `provenance` records, per decided attribute (slot, is_primary_key,
    is_arn, is_owner_account_id, is_required), whether a heuristic or an
    explicit override decided it.
    """
    name: str
    slot: Slot
    type: TypeRef
    type_name: str
    is_attribute_unpacked: bool = False
    is_primary_key: bool = False
    is_owner_account_id: bool = False
    is_arn: bool = False
    is_secret: bool = False
    is_immutable: bool = False
    is_required: bool = False
    compare_policy: ComparePolicy = field(default_factory=ComparePolicy)
    present_policy: Optional[PresentPolicy] = None
    late_init_policy: Optional[LateInitPolicy] = None
    source_operation: Optional[str] = None
    source_path: Optional[str] = None
    position: int = 0
    provenance: tuple[tuple[str, Provenance], ...] = ()

    def source_of(self, attribute: str) -> Optional[Provenance]:
        """Provenance of a decided attribute, or None if not recorded."""
        for name, source in self.provenance:
            if name == attribute:
                return source
        return None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "slot": self.slot.value,
            "type": self.type_name,
            "is_attribute_unpacked": self.is_attribute_unpacked,
            "is_primary_key": self.is_primary_key,
            "is_owner_account_id": self.is_owner_account_id,
            "is_arn": self.is_arn,
            "is_secret": self.is_secret,
            "is_immutable": self.is_immutable,
            "is_required": self.is_required,
            "compare": self.compare_policy.to_dict(),
            "print": self.present_policy.to_dict() if self.present_policy else None,
            "late_initialize": self.late_init_policy.to_dict() if self.late_init_policy else None,
            "source_operation": self.source_operation,
            "source_path": self.source_path,
            "provenance": {name: source.value for name, source in self.provenance},
        }


@dataclass(frozen=True)
class Diagnostic:
    """A note produced during resolution."""
    severity: Severity
    code: str
    message: str
    field: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "field": self.field,
            "message": self.message,
        }

    def __str__(self) -> str:
        where = f" {self.field}:" if self.field else ""
        return f"[{self.severity.value}] {self.code}:{where} {self.message}"


@dataclass(frozen=True)
class PrintColumn:
    """One generated listing column."""
    field: str
    header: str
    type_name: str
    priority: int = 0

    def to_dict(self) -> dict:
        return {
            "field": self.field,
            "header": self.header,
            "type": self.type_name,
            "priority": self.priority,
        }


@dataclass(frozen=True)
class ResolvedFieldSet:
    """Every resolved field of a resource, in declaration order."""
    resource: str
    fields: tuple[ResolvedField, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()
    columns: tuple[PrintColumn, ...] = ()
    add_age_column: bool = True

    def __iter__(self) -> Iterator[ResolvedField]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, name: object) -> bool:
        return any(f.name == name for f in self.fields)

    def get(self, name: str) -> Optional[ResolvedField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def spec_fields(self) -> list[ResolvedField]:
        return [f for f in self.fields if f.slot == Slot.SPEC]

    @property
    def status_fields(self) -> list[ResolvedField]:
        return [f for f in self.fields if f.slot == Slot.STATUS]

    @property
    def ignored_fields(self) -> list[ResolvedField]:
        return [f for f in self.fields if f.slot == Slot.IGNORED]

    @property
    def primary_key(self) -> Optional[ResolvedField]:
        return next((f for f in self.fields if f.is_primary_key), None)

    @property
    def arn_field(self) -> Optional[ResolvedField]:
        return next((f for f in self.fields if f.is_arn), None)

    @property
    def owner_account_id_field(self) -> Optional[ResolvedField]:
        return next((f for f in self.fields if f.is_owner_account_id), None)

    def column_headers(self, wide: bool = False) -> list[str]:
        """Listing headers, bracketed by the fixed NAME and AGE columns."""
        headers = [NAME_COLUMN]
        headers.extend(c.header for c in self.columns if wide or c.priority == 0)
        if self.add_age_column:
            headers.append(AGE_COLUMN)
        return headers

    def to_dict(self) -> dict:
        return {
            "resource": self.resource,
            "fields": [f.to_dict() for f in self.fields],
            "columns": [c.to_dict() for c in self.columns],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
