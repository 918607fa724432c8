"""
Type Reconciler

Decides the single authoritative type of a field from its lineage.
"""

import logging
from typing import Optional

from .config import FieldConfig
from .errors import BadSourceRedirect, ConflictingOverride, TypeAmbiguity, UnknownField
from .schema import FieldOccurrence
from .shapes import ShapeGraph, TypeRef

logger = logging.getLogger(__name__)


def follow_redirect(graph: ShapeGraph, field_name: str, override: FieldConfig) -> TypeRef:
    """
    Type of the member a `from` redirect points at.

    Raises:
        BadSourceRedirect: If the operation does not exist or the path does
            not resolve on its output or input shape
    """
    source = override.source
    operation = graph.operation(source.operation)
    if operation is None:
        raise BadSourceRedirect(field_name, f"operation {source.operation} does not exist")

    resolved = graph.resolve_path(operation, source.path)
    if resolved is None:
        raise BadSourceRedirect(
            field_name,
            f"path {source.path} does not resolve in {source.operation} "
            f"output or input shape",
        )

    role, member = resolved
    logger.debug(
        f"{field_name}: type from {source.operation} {role.value} {source.path} "
        f"({graph.describe(member.type)})"
    )
    return member.type


def reconcile_type(
    graph: ShapeGraph,
    field_name: str,
    occurrences: list[FieldOccurrence],
    override: Optional[FieldConfig] = None,
) -> TypeRef:
    """
    Decide a field's type.

    A `from` redirect wins outright and every other occurrence is ignored.
    Attribute fields are typed by the attributes map, not by shapes. Otherwise
    all occurrences must agree structurally.

    Raises:
        BadSourceRedirect: Redirect does not resolve
        ConflictingOverride: Redirect combined with is_attribute
        TypeAmbiguity: Occurrences disagree and nothing disambiguates
        UnknownField: No occurrences and nothing to take a type from
    """
    if override is not None and override.source is not None:
        if override.is_attribute:
            raise ConflictingOverride(
                field_name, "is_attribute fields cannot take their type from a `from` redirect"
            )
        return follow_redirect(graph, field_name, override)

    if override is not None and override.is_attribute:
        return TypeRef.string()

    if not occurrences:
        raise UnknownField(field_name, "field has no lineage in any operation shape")

    first = occurrences[0]
    for occurrence in occurrences[1:]:
        if not graph.same_type(first.type, occurrence.type):
            raise TypeAmbiguity(field_name, _describe_divergence(graph, occurrences))

    return first.type


def _describe_divergence(graph: ShapeGraph, occurrences: list[FieldOccurrence]) -> str:
    seen = []
    parts = []
    for occurrence in occurrences:
        signature = graph.signature(occurrence.type)
        if signature in seen:
            continue
        seen.append(signature)
        parts.append(
            f"{graph.describe(occurrence.type)} in {occurrence.operation} {occurrence.role.value}"
        )
    return "divergent types " + " vs ".join(parts) + "; add a `from` override to pick one"
