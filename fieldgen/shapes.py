"""
Shape Graph

Read-only graph of named shapes and the operations that reference them.
Shapes live in an arena (a list) and structure-typed members refer to
other shapes by index, so nested types never hold pointers to each other.

The graph document is an already-parsed API model:

    shapes:
      CreateFunctionRequest:
        members:
          - {name: FunctionName, type: string, required: true}
          - {name: Code, type: FunctionCode}
      FunctionCode:
        members:
          ImageUri: string
          S3Bucket: string
    operations:
      - {name: CreateFunction, input: CreateFunctionRequest}

Member types are a scalar name, a shape name, `list<T>` or `map<T>`.
"""

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .errors import ShapeGraphError

logger = logging.getLogger(__name__)


SCALAR_TYPES = (
    "string",
    "integer",
    "long",
    "float",
    "double",
    "boolean",
    "timestamp",
    "blob",
)

_CONTAINER_RE = re.compile(r"^(list|map)<(.+)>$")


# ============================================================================
# Enums
# ============================================================================

class TypeKind(str, Enum):
    """Kind of a type descriptor."""
    SCALAR = "scalar"
    STRUCTURE = "structure"
    LIST = "list"
    MAP = "map"


class Role(str, Enum):
    """Which side of an operation a shape sits on."""
    INPUT = "input"
    OUTPUT = "output"


class OpType(str, Enum):
    """Operation type, used by the classifier heuristics."""
    CREATE = "Create"
    READ_ONE = "ReadOne"
    READ_MANY = "ReadMany"
    UPDATE = "Update"
    DELETE = "Delete"
    OTHER = "Other"


# Prefix -> operation type, checked in order
OP_TYPE_PREFIXES = [
    ("Create", OpType.CREATE),
    ("Get", OpType.READ_ONE),
    ("Describe", OpType.READ_ONE),
    ("List", OpType.READ_MANY),
    ("Update", OpType.UPDATE),
    ("Modify", OpType.UPDATE),
    ("Put", OpType.UPDATE),
    ("Delete", OpType.DELETE),
]


def infer_op_type(operation_name: str) -> OpType:
    """Infer an operation's type from its name prefix."""
    for prefix, op_type in OP_TYPE_PREFIXES:
        if operation_name.startswith(prefix):
            return op_type
    return OpType.OTHER


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class TypeRef:
    """
    Type descriptor for a member.

    Scalars carry `scalar`, structures carry the arena index in `shape`,
    lists and maps carry the element descriptor in `element`.
    """
    kind: TypeKind
    scalar: Optional[str] = None
    shape: Optional[int] = None
    element: Optional["TypeRef"] = None

    @classmethod
    def of_scalar(cls, name: str) -> "TypeRef":
        return cls(kind=TypeKind.SCALAR, scalar=name)

    @classmethod
    def string(cls) -> "TypeRef":
        return cls.of_scalar("string")

    @classmethod
    def of_shape(cls, index: int) -> "TypeRef":
        return cls(kind=TypeKind.STRUCTURE, shape=index)

    @classmethod
    def list_of(cls, element: "TypeRef") -> "TypeRef":
        return cls(kind=TypeKind.LIST, element=element)

    @classmethod
    def map_of(cls, element: "TypeRef") -> "TypeRef":
        return cls(kind=TypeKind.MAP, element=element)

    @property
    def is_structure(self) -> bool:
        return self.kind == TypeKind.STRUCTURE


@dataclass(frozen=True)
class Member:
    """A named, typed member of a shape."""
    name: str
    type: TypeRef
    required: bool = False


@dataclass(frozen=True)
class Shape:
    """A named record with members in declaration order."""
    name: str
    members: tuple[Member, ...] = ()

    def member(self, name: str) -> Optional[Member]:
        for m in self.members:
            if m.name == name:
                return m
        return None


@dataclass(frozen=True)
class Operation:
    """An API operation referencing an input and an output shape."""
    name: str
    input: Optional[int] = None
    output: Optional[int] = None
    op_type: OpType = OpType.OTHER

    def shape_for(self, role: Role) -> Optional[int]:
        return self.input if role == Role.INPUT else self.output


# ============================================================================
# Shape Graph
# ============================================================================

class ShapeGraph:
    """
    Immutable arena of shapes plus the operations that use them.

    Operation order is the declaration order of the graph document and is
    the walk order used by lineage resolution.
    """

    def __init__(self, shapes: list[Shape], operations: list[Operation]):
        self._shapes = tuple(shapes)
        self._operations = tuple(operations)
        self._shape_index: dict[str, int] = {}
        self._operation_index: dict[str, Operation] = {}

        for i, shape in enumerate(self._shapes):
            if shape.name in self._shape_index:
                raise ShapeGraphError(f"Duplicate shape: {shape.name}")
            self._shape_index[shape.name] = i

        for op in self._operations:
            if op.name in self._operation_index:
                raise ShapeGraphError(f"Duplicate operation: {op.name}")
            for ref in (op.input, op.output):
                if ref is not None and not 0 <= ref < len(self._shapes):
                    raise ShapeGraphError(
                        f"Operation {op.name} references unknown shape index {ref}"
                    )
            self._operation_index[op.name] = op

    @property
    def shapes(self) -> tuple[Shape, ...]:
        return self._shapes

    @property
    def operations(self) -> tuple[Operation, ...]:
        return self._operations

    def shape(self, index: int) -> Shape:
        return self._shapes[index]

    def shape_index(self, name: str) -> Optional[int]:
        return self._shape_index.get(name)

    def operation(self, name: str) -> Optional[Operation]:
        return self._operation_index.get(name)

    def operation_shape(self, operation: Operation, role: Role) -> Optional[Shape]:
        """Get the input or output shape of an operation, if any."""
        index = operation.shape_for(role)
        if index is None:
            return None
        return self._shapes[index]

    # ------------------------------------------------------------------
    # Type comparison and rendering
    # ------------------------------------------------------------------

    def signature(self, ref: TypeRef, _stack: tuple = ()) -> tuple:
        """
        Structural signature of a type.

        Structures compare by ordered member names and types. A structure
        already being expanded further up the stack is represented by how
        many levels up it sits, so recursive shapes terminate and two
        recursive shapes with the same structure but different names match.
        """
        if ref.kind == TypeKind.SCALAR:
            return ("scalar", ref.scalar)
        if ref.kind in (TypeKind.LIST, TypeKind.MAP):
            return (ref.kind.value, self.signature(ref.element, _stack))

        if ref.shape in _stack:
            return ("ref", len(_stack) - _stack.index(ref.shape))
        shape = self._shapes[ref.shape]
        stack = _stack + (ref.shape,)
        return (
            "structure",
            tuple((m.name, self.signature(m.type, stack)) for m in shape.members),
        )

    def same_type(self, a: TypeRef, b: TypeRef) -> bool:
        return self.signature(a) == self.signature(b)

    def describe(self, ref: TypeRef) -> str:
        """Render a type the way the graph document spells it."""
        if ref.kind == TypeKind.SCALAR:
            return ref.scalar
        if ref.kind == TypeKind.STRUCTURE:
            return self._shapes[ref.shape].name
        return f"{ref.kind.value}<{self.describe(ref.element)}>"

    # ------------------------------------------------------------------
    # Path resolution
    # ------------------------------------------------------------------

    def resolve_path(self, operation: Operation, path: str) -> Optional[tuple[Role, Member]]:
        """
        Follow a dotted member path inside an operation's shapes.

        The output shape is searched first, then the input shape. Segments
        after the first descend into structure members; list and map members
        descend into their element when it is a structure. Every list or map
        crossed on the way wraps the returned member's type, so `Tags.Key`
        on a `list<Tag>` member resolves to `list<string>`.

        Returns:
            (role, member) of the final segment, or None if the path does
            not resolve on either shape.
        """
        segments = path.split(".")
        for role in (Role.OUTPUT, Role.INPUT):
            shape = self.operation_shape(operation, role)
            if shape is None:
                continue
            member = self._walk(shape, segments)
            if member is not None:
                return role, member
        return None

    def _walk(self, shape: Shape, segments: list[str]) -> Optional[Member]:
        member = None
        containers: list[TypeKind] = []
        for i, segment in enumerate(segments):
            if shape is None:
                return None
            member = shape.member(segment)
            if member is None:
                return None
            if i < len(segments) - 1:
                shape = self._descend(member.type, containers)

        type_ref = member.type
        for kind in reversed(containers):
            type_ref = TypeRef(kind=kind, element=type_ref)
        return replace(member, type=type_ref) if containers else member

    def _descend(self, ref: TypeRef, containers: list[TypeKind]) -> Optional[Shape]:
        while ref.kind in (TypeKind.LIST, TypeKind.MAP):
            containers.append(ref.kind)
            ref = ref.element
        if ref.kind == TypeKind.STRUCTURE:
            return self._shapes[ref.shape]
        return None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShapeGraph":
        """
        Build a graph from a parsed graph document.

        Raises:
            ShapeGraphError: If the document is malformed
        """
        if not isinstance(data, dict):
            raise ShapeGraphError("Shape graph document must be a mapping at top level")

        shape_defs = data.get("shapes") or {}
        op_defs = data.get("operations") or []
        if not isinstance(shape_defs, dict):
            raise ShapeGraphError("'shapes' must be a mapping of shape name to definition")
        if not isinstance(op_defs, list):
            raise ShapeGraphError("'operations' must be a list")

        # First pass fixes arena indices so members can refer forward
        names = list(shape_defs.keys())
        index = {name: i for i, name in enumerate(names)}

        shapes = []
        for name in names:
            if not isinstance(name, str):
                raise ShapeGraphError(f"Shape name must be a string: {name!r}")
            definition = shape_defs[name] or {}
            if not isinstance(definition, dict):
                raise ShapeGraphError(f"Shape {name} must be a mapping")
            members = tuple(
                _parse_member(name, m, index)
                for m in _iter_member_defs(name, definition.get("members") or [])
            )
            shapes.append(Shape(name=name, members=members))

        operations = []
        for op_def in op_defs:
            if not isinstance(op_def, dict) or not op_def.get("name"):
                raise ShapeGraphError(f"Operation entry missing 'name': {op_def!r}")
            op_name = op_def["name"]
            if not isinstance(op_name, str):
                raise ShapeGraphError(f"Operation name must be a string: {op_name!r}")
            op_type_str = op_def.get("type")
            try:
                op_type = OpType(op_type_str) if op_type_str else infer_op_type(op_name)
            except ValueError:
                raise ShapeGraphError(f"Invalid operation type for {op_name}: {op_type_str}")
            operations.append(Operation(
                name=op_name,
                input=_shape_ref(op_name, op_def.get("input"), index),
                output=_shape_ref(op_name, op_def.get("output"), index),
                op_type=op_type,
            ))

        logger.debug(f"Loaded shape graph: {len(shapes)} shapes, {len(operations)} operations")
        return cls(shapes, operations)


def _iter_member_defs(shape_name: str, members: Union[list, dict]):
    """Yield (name, type, required) from either list or mapping member syntax."""
    if isinstance(members, dict):
        for name, type_str in members.items():
            yield name, type_str, False
        return
    if not isinstance(members, list):
        raise ShapeGraphError(f"Members of shape {shape_name} must be a list or mapping")
    for m in members:
        if not isinstance(m, dict) or "name" not in m or "type" not in m:
            raise ShapeGraphError(f"Member of shape {shape_name} needs 'name' and 'type': {m!r}")
        yield m["name"], m["type"], bool(m.get("required", False))


def _parse_member(shape_name: str, member_def: tuple, index: dict[str, int]) -> Member:
    name, type_str, required = member_def
    if not isinstance(name, str):
        raise ShapeGraphError(f"Member name in shape {shape_name} must be a string: {name!r}")
    if not isinstance(type_str, str):
        raise ShapeGraphError(f"Type of {shape_name}.{name} must be a string: {type_str!r}")
    return Member(
        name=name,
        type=parse_type(type_str, index, context=f"{shape_name}.{name}"),
        required=required,
    )


def _shape_ref(op_name: str, shape_name: Optional[str], index: dict[str, int]) -> Optional[int]:
    if shape_name is None:
        return None
    if not isinstance(shape_name, str):
        raise ShapeGraphError(
            f"Operation {op_name} must reference its shapes by name, got {shape_name!r}"
        )
    if shape_name not in index:
        raise ShapeGraphError(f"Operation {op_name} references unknown shape: {shape_name}")
    return index[shape_name]


def parse_type(type_str: str, index: dict[str, int], context: str = "") -> TypeRef:
    """Parse a type spelling (`string`, `Shape`, `list<T>`, `map<T>`)."""
    type_str = type_str.strip()
    match = _CONTAINER_RE.match(type_str)
    if match:
        element = parse_type(match.group(2), index, context)
        if match.group(1) == "list":
            return TypeRef.list_of(element)
        return TypeRef.map_of(element)
    if type_str in SCALAR_TYPES:
        return TypeRef.of_scalar(type_str)
    if type_str in index:
        return TypeRef.of_shape(index[type_str])
    raise ShapeGraphError(f"Unknown type '{type_str}' for {context}")


def load_shape_graph(path: Path) -> ShapeGraph:
    """
    Load a shape graph document (YAML or JSON).

    Raises:
        ShapeGraphError: If the file is missing or malformed
    """
    path = Path(path)
    if not path.exists():
        raise ShapeGraphError(f"Shape graph file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ShapeGraphError(f"Invalid YAML in {path}: {e}")

    return ShapeGraph.from_dict(data)
