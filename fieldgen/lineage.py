"""
Field Lineage Resolver

Collects every (operation, role, type) occurrence of each field name across
a resource's operations.

Walk order is part of the contract: operations in graph declaration order,
for each operation its input shape then its output shape, members in shape
declaration order. The first time a name is seen fixes its declaration
position, which drives first-match-wins flag assignment and output order.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .config import FieldConfig
from .schema import FieldOccurrence
from .shapes import Member, Operation, Role, ShapeGraph

logger = logging.getLogger(__name__)


@dataclass
class FieldLineage:
    """
    Occurrences grouped by field name, in declaration order.

    `decomposed` maps a structure member that was flattened into its
    children to the override field whose redirect path caused it.
    `unknown` lists overridden names with no lineage and nothing else to
    take a type from.
    """
    occurrences: dict[str, list[FieldOccurrence]] = field(default_factory=dict)
    decomposed: dict[str, str] = field(default_factory=dict)
    unknown: list[str] = field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return list(self.occurrences.keys())

    def get(self, name: str) -> list[FieldOccurrence]:
        return self.occurrences.get(name, [])

    def add(self, name: str, occurrence: FieldOccurrence) -> None:
        self.occurrences.setdefault(name, []).append(occurrence)


def decomposition_parents(overrides: dict[str, FieldConfig]) -> dict[str, str]:
    """
    Top-level members to flatten into prefixed child fields.

    A redirect path with more than one segment reaches inside a structure
    member (e.g. `Code.Location`). That member is flattened unless it has an
    override entry of its own.
    """
    parents: dict[str, str] = {}
    for name, override in overrides.items():
        if override.source is None:
            continue
        segments = override.source.segments
        if len(segments) < 2:
            continue
        parent = segments[0]
        if parent in overrides or parent in parents:
            continue
        parents[parent] = name
    return parents


def resolve_lineage(
    graph: ShapeGraph,
    overrides: Optional[dict[str, FieldConfig]] = None,
) -> FieldLineage:
    """
    Walk every operation's shapes and group members by field name.

    Args:
        graph: The shape graph
        overrides: Field overrides keyed by field name

    Returns:
        FieldLineage in declaration order. Overridden names without lineage
        are appended after all shape-derived names when they can still be
        typed (a `from` redirect or an attribute field); the rest are
        listed in `unknown`.
    """
    overrides = overrides or {}
    lineage = FieldLineage(decomposed=decomposition_parents(overrides))

    for operation in graph.operations:
        for role in (Role.INPUT, Role.OUTPUT):
            shape = graph.operation_shape(operation, role)
            if shape is None:
                continue
            for member in shape.members:
                if member.name in lineage.decomposed and member.type.is_structure:
                    _add_children(graph, lineage, operation, role, member)
                else:
                    lineage.add(member.name, _occurrence(operation, role, member, member.name))

    for name, override in overrides.items():
        if name in lineage.occurrences:
            continue
        if override.source is not None or override.is_attribute:
            lineage.occurrences[name] = []
        else:
            lineage.unknown.append(name)

    logger.debug(
        f"Lineage: {len(lineage.occurrences)} field(s), "
        f"{len(lineage.decomposed)} decomposed, {len(lineage.unknown)} unknown"
    )
    return lineage


def _add_children(
    graph: ShapeGraph,
    lineage: FieldLineage,
    operation: Operation,
    role: Role,
    parent: Member,
) -> None:
    shape = graph.shape(parent.type.shape)
    for child in shape.members:
        path = f"{parent.name}.{child.name}"
        lineage.add(parent.name + child.name, _occurrence(operation, role, child, path))


def _occurrence(operation: Operation, role: Role, member: Member, path: str) -> FieldOccurrence:
    return FieldOccurrence(
        operation=operation.name,
        role=role,
        member_name=member.name,
        type=member.type,
        op_type=operation.op_type,
        required=member.required,
        path=path,
    )
