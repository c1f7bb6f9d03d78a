"""Node types of the store.

Nodes are immutable values. A mutation never edits a node; it builds a
replacement with `dataclasses.replace` and hands a new store to the caller.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, ClassVar, TypeAlias

from rulegraph._enums import CellKind, CellRole, LiteralType, NodeKind

if TYPE_CHECKING:
    from collections.abc import Iterator

    from pydantic import JsonValue

VariablePath: TypeAlias = str | int | tuple[str | int, ...]


def new_node_id() -> str:
    """Generate a fresh node identifier."""
    return str(uuid.uuid4())


@dataclass(frozen=True, slots=True)
class Cell:
    """One slot of an operator node or one element of a structure node.

    Attributes:
        kind: Whether the slot embeds a value, holds an editable field or
            references a child node.
        index: Position of the slot among its siblings.
        value: The embedded value (inline) or field value (editable).
        branch_id: Id of the child node (branch). None on a branch cell
            means the reference was cleared and awaits a replacement.
        role: Row role for decision and accessor operators.
        field_id: Name of the field for editable cells (e.g. ``path``).
        key: Object key for elements of an object structure.

    """

    kind: CellKind
    index: int
    value: JsonValue = None
    branch_id: str | None = None
    role: CellRole | None = None
    field_id: str | None = None
    key: str | None = None

    @classmethod
    def branch(cls, index: int, branch_id: str | None, **kwargs: object) -> Cell:
        return cls(kind=CellKind.BRANCH, index=index, branch_id=branch_id, **kwargs)  # type: ignore[arg-type]

    @classmethod
    def inline(cls, index: int, value: JsonValue, **kwargs: object) -> Cell:
        return cls(kind=CellKind.INLINE, index=index, value=value, **kwargs)  # type: ignore[arg-type]

    @property
    def is_branch(self) -> bool:
        return self.kind is CellKind.BRANCH

    @property
    def label(self) -> str | None:
        """Row label shown next to the cell, if it has a role."""
        return self.role.label if self.role is not None else None


@dataclass(frozen=True, slots=True, kw_only=True)
class NodeBase:
    """Fields shared by every node kind.

    Attributes:
        id: Identifier, unique within the store.
        parent_id: Id of the owning node, or None for a tree root.
        arg_index: Index of the parent slot that references this node.

    """

    kind: ClassVar[NodeKind]

    id: str
    parent_id: str | None = None
    arg_index: int | None = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


@dataclass(frozen=True, slots=True, kw_only=True)
class LiteralNode(NodeBase):
    """An atomic JSON value (or a plain container without expressions)."""

    kind: ClassVar[NodeKind] = NodeKind.LITERAL

    value: JsonValue
    value_type: LiteralType

    @classmethod
    def of(cls, value: JsonValue, *, id: str, parent_id: str | None = None, arg_index: int | None = None) -> LiteralNode:  # noqa: A002
        return cls(id=id, value=value, value_type=LiteralType.of(value), parent_id=parent_id, arg_index=arg_index)

    @property
    def expression(self) -> JsonValue:
        return self.value


@dataclass(frozen=True, slots=True, kw_only=True)
class VariableNode(NodeBase):
    """A data accessor: ``var``, ``val`` or ``exists``.

    Attributes:
        operator: The accessor operator name.
        path: Dot-notation string, array index, or tuple of path segments.
        default: Fallback value (``var`` only), meaningful when `has_default`.
        has_default: Whether a default is set. A default of ``None`` is a
            legitimate JSON null, so presence is tracked separately.
        scope_jump: Number of scope levels to climb (``val`` only).

    """

    kind: ClassVar[NodeKind] = NodeKind.VARIABLE

    operator: str
    path: VariablePath = ""
    default: JsonValue = None
    has_default: bool = False
    scope_jump: int | None = None

    @property
    def segments(self) -> tuple[str | int, ...]:
        """The path as a tuple of segments."""
        if isinstance(self.path, tuple):
            return self.path
        if isinstance(self.path, int):
            return (self.path,)
        return tuple(part for part in self.path.split(".") if part) if self.path else ()

    @property
    def expression(self) -> JsonValue:
        """Canonical call form of the accessor."""
        path: JsonValue = list(self.path) if isinstance(self.path, tuple) else self.path
        match self.operator:
            case "var":
                if self.has_default:
                    return {"var": [path, self.default]}
                return {"var": path}
            case "val":
                if self.scope_jump is None:
                    return {"val": path}
                args: list[JsonValue] = [[-self.scope_jump]]
                args.extend(self.path if isinstance(self.path, tuple) else (self.path,))
                return {"val": args}
            case _:
                return {self.operator: path}


@dataclass(frozen=True, slots=True, kw_only=True)
class OperatorNode(NodeBase):
    """An operator application with ordered cells.

    Attributes:
        operator: Operator name (the single key of the expression object).
        category: Category from the registry, used for default values.
        cells: Slots in operand order; ``cells[i].index == i``.
        expression: Cached projection of this node.
        expression_text: Optional cached display text.
        bare_operand: The single operand is written without an array
            wrapper (``{"!": true}`` rather than ``{"!": [true]}``).

    """

    kind: ClassVar[NodeKind] = NodeKind.OPERATOR

    operator: str
    category: str = ""
    cells: tuple[Cell, ...] = ()
    expression: JsonValue = None
    expression_text: str | None = None
    bare_operand: bool = False

    def cell_at(self, index: int) -> Cell | None:
        if 0 <= index < len(self.cells):
            return self.cells[index]
        return None

    def branch_ids(self) -> Iterator[str]:
        return (cell.branch_id for cell in self.cells if cell.is_branch and cell.branch_id is not None)

    def replace_reference(self, old_id: str, new_id: str) -> OperatorNode:
        return replace(self, cells=_replace_reference(self.cells, old_id, new_id))


@dataclass(frozen=True, slots=True, kw_only=True)
class StructureNode(NodeBase):
    """An object or array template whose elements may be expressions.

    Attributes:
        is_array: True for an array template, False for an object.
        cells: Elements in order; object elements carry a `key`.
        expression: Cached projection of this node.

    """

    kind: ClassVar[NodeKind] = NodeKind.STRUCTURE

    is_array: bool
    cells: tuple[Cell, ...] = ()
    expression: JsonValue = None

    def cell_at(self, index: int) -> Cell | None:
        if 0 <= index < len(self.cells):
            return self.cells[index]
        return None

    def branch_ids(self) -> Iterator[str]:
        return (cell.branch_id for cell in self.cells if cell.is_branch and cell.branch_id is not None)

    def replace_reference(self, old_id: str, new_id: str) -> StructureNode:
        return replace(self, cells=_replace_reference(self.cells, old_id, new_id))


Node: TypeAlias = LiteralNode | VariableNode | OperatorNode | StructureNode
CompositeNode: TypeAlias = OperatorNode | StructureNode


def _replace_reference(cells: tuple[Cell, ...], old_id: str, new_id: str) -> tuple[Cell, ...]:
    return tuple(replace(cell, branch_id=new_id) if cell.branch_id == old_id else cell for cell in cells)


def reindex_cells(cells: tuple[Cell, ...] | list[Cell]) -> tuple[Cell, ...]:
    """Renumber cells so that ``cells[i].index == i``."""
    return tuple(cell if cell.index == i else replace(cell, index=i) for i, cell in enumerate(cells))


def child_ids(node: Node) -> tuple[str, ...]:
    """Direct child ids of a node, in slot order."""
    match node:
        case OperatorNode() | StructureNode():
            return tuple(node.branch_ids())
        case LiteralNode() | VariableNode():
            return ()
