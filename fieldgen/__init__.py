"""
fieldgen - Field lineage resolution for generated control-plane resources

Given an API's operations (input/output shapes) and a sparse table of
per-field override directives, decides for every field name which slot it
occupies (Spec, Status or Ignored), what type it carries, and which
comparison, listing and late-initialization policies apply to it.
"""

from .errors import (
    FieldgenError,
    ConfigError,
    ShapeGraphError,
    FieldResolutionError,
    UnknownField,
    TypeAmbiguity,
    BadSourceRedirect,
    ConflictingOverride,
    InvalidBackoffBounds,
    ResolutionFailed,
)

from .shapes import (
    ShapeGraph,
    Shape,
    Member,
    Operation,
    OpType,
    Role,
    TypeKind,
    TypeRef,
    load_shape_graph,
)

from .config import (
    FieldConfig,
    SourceFieldConfig,
    CompareFieldConfig,
    PrintFieldConfig,
    LateInitializeConfig,
    ResourceConfig,
    ResourcePrintConfig,
    GeneratorConfig,
    find_config_path,
    load_generator_config,
)

from .schema import (
    Slot,
    Provenance,
    Severity,
    Decision,
    FieldOccurrence,
    ComparePolicy,
    PresentPolicy,
    LateInitPolicy,
    ResolvedField,
    Diagnostic,
    PrintColumn,
    ResolvedFieldSet,
)

from .lineage import FieldLineage, resolve_lineage
from .reconciler import reconcile_type
from .classifier import classify, assign_singleton_flag
from .unpacker import apply_attribute_unpacking
from .policies import (
    attach_compare_policy,
    attach_present_policy,
    attach_late_init_policy,
    order_columns,
)
from .resolver import FieldResolver, resolve_fields

__version__ = "0.1.0"
__all__ = [
    # Errors
    "FieldgenError",
    "ConfigError",
    "ShapeGraphError",
    "FieldResolutionError",
    "UnknownField",
    "TypeAmbiguity",
    "BadSourceRedirect",
    "ConflictingOverride",
    "InvalidBackoffBounds",
    "ResolutionFailed",

    # Shape graph
    "ShapeGraph",
    "Shape",
    "Member",
    "Operation",
    "OpType",
    "Role",
    "TypeKind",
    "TypeRef",
    "load_shape_graph",

    # Config
    "FieldConfig",
    "SourceFieldConfig",
    "CompareFieldConfig",
    "PrintFieldConfig",
    "LateInitializeConfig",
    "ResourceConfig",
    "ResourcePrintConfig",
    "GeneratorConfig",
    "find_config_path",
    "load_generator_config",

    # Schema
    "Slot",
    "Provenance",
    "Severity",
    "Decision",
    "FieldOccurrence",
    "ComparePolicy",
    "PresentPolicy",
    "LateInitPolicy",
    "ResolvedField",
    "Diagnostic",
    "PrintColumn",
    "ResolvedFieldSet",

    # Components
    "FieldLineage",
    "resolve_lineage",
    "reconcile_type",
    "classify",
    "assign_singleton_flag",
    "apply_attribute_unpacking",
    "attach_compare_policy",
    "attach_present_policy",
    "attach_late_init_policy",
    "order_columns",
    "FieldResolver",
    "resolve_fields",
]
