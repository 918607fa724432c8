"""
Attribute Unpacker

Some APIs return real, schema'd resource fields inside a generic
string-keyed "Attributes" map. Fields marked `is_attribute` are unpacked
from that map, so their type is always a scalar string and the emitter
generates map lookups instead of direct member access.
"""

import logging
from dataclasses import replace

from .schema import ResolvedField
from .shapes import TypeKind, TypeRef

logger = logging.getLogger(__name__)


def apply_attribute_unpacking(field: ResolvedField) -> ResolvedField:
    """Fix the field's type to string and mark it map-unpacked. Slot is kept."""
    if field.type.kind != TypeKind.SCALAR or field.type.scalar != "string":
        logger.debug(f"{field.name}: attribute field retyped from {field.type_name} to string")
    return replace(
        field,
        type=TypeRef.string(),
        type_name="string",
        is_attribute_unpacked=True,
    )
