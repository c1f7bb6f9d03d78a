"""JSON snapshots of a store, preserving node ids."""

from __future__ import annotations

import logging
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, JsonValue

from ._enums import CellKind, CellRole, LiteralType
from ._model import Cell, LiteralNode, Node, NodeStore, OperatorNode, StructureNode, VariableNode

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class _Model(BaseModel):
    model_config = ConfigDict(extra="forbid")


class CellModel(_Model):
    kind: CellKind
    index: int
    value: JsonValue = None
    branch_id: str | None = None
    role: CellRole | None = None
    field_id: str | None = None
    key: str | None = None


class _NodeModel(_Model):
    id: str
    parent_id: str | None = None
    arg_index: int | None = None


class LiteralModel(_NodeModel):
    kind: Literal["literal"] = "literal"
    value: JsonValue
    value_type: LiteralType


class VariableModel(_NodeModel):
    kind: Literal["variable"] = "variable"
    operator: str
    path: str | int | list[str | int] = ""
    default: JsonValue = None
    has_default: bool = False
    scope_jump: int | None = None


class OperatorModel(_NodeModel):
    kind: Literal["operator"] = "operator"
    operator: str
    category: str = ""
    cells: list[CellModel] = Field(default_factory=list)
    expression: JsonValue = None
    expression_text: str | None = None
    bare_operand: bool = False


class StructureModel(_NodeModel):
    kind: Literal["structure"] = "structure"
    is_array: bool
    cells: list[CellModel] = Field(default_factory=list)
    expression: JsonValue = None


NodeModel = Annotated[LiteralModel | VariableModel | OperatorModel | StructureModel, Field(discriminator="kind")]


class StoreSnapshot(_Model):
    """Serialized form of a store."""

    version: Literal[1] = SNAPSHOT_VERSION
    nodes: list[NodeModel] = Field(default_factory=list)


def _cell_to_model(cell: Cell) -> CellModel:
    return CellModel(
        kind=cell.kind,
        index=cell.index,
        value=cell.value,
        branch_id=cell.branch_id,
        role=cell.role,
        field_id=cell.field_id,
        key=cell.key,
    )


def _cell_from_model(model: CellModel) -> Cell:
    return Cell(**model.model_dump())


def _to_model(node: Node) -> NodeModel:
    base = {"id": node.id, "parent_id": node.parent_id, "arg_index": node.arg_index}
    match node:
        case LiteralNode():
            return LiteralModel(**base, value=node.value, value_type=node.value_type)
        case VariableNode():
            path = list(node.path) if isinstance(node.path, tuple) else node.path
            return VariableModel(
                **base,
                operator=node.operator,
                path=path,
                default=node.default,
                has_default=node.has_default,
                scope_jump=node.scope_jump,
            )
        case OperatorNode():
            return OperatorModel(
                **base,
                operator=node.operator,
                category=node.category,
                cells=[_cell_to_model(cell) for cell in node.cells],
                expression=node.expression,
                expression_text=node.expression_text,
                bare_operand=node.bare_operand,
            )
        case StructureNode():
            return StructureModel(
                **base,
                is_array=node.is_array,
                cells=[_cell_to_model(cell) for cell in node.cells],
                expression=node.expression,
            )


def _from_model(model: NodeModel) -> Node:
    base = {"id": model.id, "parent_id": model.parent_id, "arg_index": model.arg_index}
    match model:
        case LiteralModel():
            return LiteralNode(**base, value=model.value, value_type=model.value_type)
        case VariableModel():
            path = tuple(model.path) if isinstance(model.path, list) else model.path
            return VariableNode(
                **base,
                operator=model.operator,
                path=path,
                default=model.default,
                has_default=model.has_default,
                scope_jump=model.scope_jump,
            )
        case OperatorModel():
            return OperatorNode(
                **base,
                operator=model.operator,
                category=model.category,
                cells=tuple(_cell_from_model(cell) for cell in model.cells),
                expression=model.expression,
                expression_text=model.expression_text,
                bare_operand=model.bare_operand,
            )
        case StructureModel():
            return StructureNode(
                **base,
                is_array=model.is_array,
                cells=tuple(_cell_from_model(cell) for cell in model.cells),
                expression=model.expression,
            )


def dump_store(store: NodeStore, *, indent: int | None = 2) -> str:
    """Serialize a store to JSON text."""
    snapshot = StoreSnapshot(nodes=[_to_model(node) for node in store])
    return snapshot.model_dump_json(indent=indent)


def load_store(text: str | bytes) -> NodeStore:
    """Load a store written by `dump_store`.

    Cached expressions are taken as stored; run `validate_store` on input
    from untrusted sources.

    Raises:
        pydantic.ValidationError: If the text is not a valid snapshot.

    """
    snapshot = StoreSnapshot.model_validate_json(text)
    store = NodeStore(tuple(_from_model(model) for model in snapshot.nodes))
    logger.debug("Loaded store with %d nodes", len(store))
    return store
