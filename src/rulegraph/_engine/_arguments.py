"""Adding and removing operands of an operator."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from rulegraph._enums import CellKind, CellRole
from rulegraph._model import Cell, LiteralNode, OperatorNode, VariableNode, new_node_id, reindex_cells
from rulegraph._registry import DECISION_OPERATORS, get_operator
from rulegraph._traversal import subtree_ids

from ._common import NewNodeKind, argument_nodes, commit, sync_children
from ._result import MutationResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from rulegraph._model import Node, NodeStore
    from rulegraph._registry import OperatorRegistry

logger = logging.getLogger(__name__)


def add_argument(
    store: NodeStore,
    parent_id: str,
    node_kind: NewNodeKind | str = NewNodeKind.LITERAL,
    operator_name: str | None = None,
    *,
    registry: OperatorRegistry | None = None,
    new_id: Callable[[], str] = new_node_id,
) -> MutationResult:
    """Append a new operand to an operator.

    The parent must be a registered operator with an extendable arity that
    is not yet at its maximum. Decision operators gain a condition/then pair
    before their else branch instead of a single operand, and ``val``
    accessors gain an empty path segment.

    Args:
        store: The current store.
        parent_id: Id of the operator to extend.
        node_kind: Kind of the new operand.
        operator_name: Operator of the new operand when `node_kind` is
            ``operator``.
        registry: Operator registry; defaults to the built-in one.
        new_id: Identifier factory.

    Returns:
        The new store and the id of the new operand (of the new condition
        for decision operators; of the parent for ``val`` path segments).

    Example:
        >>> store = build_store({"+": [2, 3]})
        >>> result = add_argument(store, store.root.id)
        >>> project_store(result.store)
        {'+': [2, 3, 0]}

    """
    parent = store.get(parent_id)
    if isinstance(parent, VariableNode) and parent.operator == "val":
        return _add_val_segment(store, parent)
    if not isinstance(parent, OperatorNode):
        return MutationResult.rejected(store, "%s is not an operator node", parent_id)
    spec = get_operator(parent.operator, registry)
    if spec is None or not spec.is_extendable:
        return MutationResult.rejected(store, "operator %r does not take extra operands", parent.operator)
    if spec.max is not None and len(parent.cells) >= spec.max:
        return MutationResult.rejected(store, "operator %r already has %d operands", parent.operator, spec.max)
    try:
        kind = NewNodeKind(node_kind)
    except ValueError:
        return MutationResult.rejected(store, "unknown node kind %r", node_kind)

    if parent.operator in DECISION_OPERATORS:
        return _add_condition_pair(store, parent, new_id)
    if parent.operator == "val":
        cell = Cell(kind=CellKind.EDITABLE, index=len(parent.cells), value="", role=CellRole.PATH, field_id="path")
        updated = replace(parent, cells=(*parent.cells, cell), bare_operand=False)
        return MutationResult(commit(store, [updated], refresh_from=parent.id), parent.id)

    index = len(parent.cells)
    new_nodes = argument_nodes(
        kind,
        parent_id=parent.id,
        arg_index=index,
        category=parent.category or spec.category,
        new_id=new_id,
        operator_name=operator_name,
        registry=registry,
    )
    if not new_nodes:
        return MutationResult.rejected(store, "could not create a %s operand", kind)
    updated = replace(parent, cells=(*parent.cells, Cell.branch(index, new_nodes[0].id)), bare_operand=False)
    new_store = commit(store, [updated], added=new_nodes, refresh_from=parent.id)
    logger.debug("Added %s operand %s to %s", kind, new_nodes[0].id, parent.id)
    return MutationResult(new_store, new_nodes[0].id)


def _add_val_segment(store: NodeStore, parent: VariableNode) -> MutationResult:
    updated = replace(parent, path=(*parent.segments, ""))
    return MutationResult(commit(store, [updated], refresh_from=parent.parent_id), parent.id)


def _add_condition_pair(store: NodeStore, parent: OperatorNode, new_id: Callable[[], str]) -> MutationResult:
    cells = list(parent.cells)
    insert_at = len(cells) - 1 if cells and cells[-1].role is CellRole.ELSE else len(cells)
    condition = LiteralNode.of(True, id=new_id(), parent_id=parent.id, arg_index=insert_at)  # noqa: FBT003
    value = LiteralNode.of(0, id=new_id(), parent_id=parent.id, arg_index=insert_at + 1)
    cells[insert_at:insert_at] = [
        Cell.branch(insert_at, condition.id, role=CellRole.ELSE_IF),
        Cell.branch(insert_at + 1, value.id, role=CellRole.THEN),
    ]
    updated = replace(parent, cells=_relabel_first_condition(reindex_cells(cells)), bare_operand=False)
    # Operands after the insertion point shift right by two
    shifted = sync_children(store, updated)
    new_store = commit(store, [updated, *shifted], added=[condition, value], refresh_from=parent.id)
    logger.debug("Added condition pair at %d to %s", insert_at, parent.id)
    return MutationResult(new_store, condition.id)


def _relabel_first_condition(cells: tuple[Cell, ...]) -> tuple[Cell, ...]:
    for i, cell in enumerate(cells):
        if cell.role is not None and cell.role.is_condition:
            if cell.role is CellRole.IF:
                return cells
            return (*cells[:i], replace(cell, role=CellRole.IF), *cells[i + 1 :])
    return cells


def _decision_indices(cells: tuple[Cell, ...], index: int) -> list[int] | None:
    """Cells removed together when the user removes the cell at `index`."""
    match cells[index].role:
        case CellRole.IF | CellRole.ELSE_IF:
            if index + 1 < len(cells) and cells[index + 1].role is CellRole.THEN:
                return [index, index + 1]
            return [index]
        case CellRole.THEN:
            if index > 0 and cells[index - 1].role is not None and cells[index - 1].role.is_condition:
                return [index - 1, index]
            return [index]
        case CellRole.ELSE:
            return [index]
        case _:
            return None


def remove_argument(
    store: NodeStore,
    parent_id: str,
    arg_index: int,
    *,
    registry: OperatorRegistry | None = None,
) -> MutationResult:
    """Remove the operand at `arg_index` together with its subtree.

    Later operands shift left. Decision operators remove a condition/then
    pair as a unit and always keep at least one pair.

    Returns:
        The new store and the parent id.

    """
    parent = store.get(parent_id)
    if isinstance(parent, VariableNode) and parent.operator == "val":
        return _remove_val_segment(store, parent, arg_index)
    if not isinstance(parent, OperatorNode):
        return MutationResult.rejected(store, "%s is not an operator node", parent_id)
    if parent.cell_at(arg_index) is None:
        return MutationResult.rejected(store, "%s has no operand %d", parent_id, arg_index)

    decision = parent.operator in DECISION_OPERATORS
    indices = _decision_indices(parent.cells, arg_index) if decision else [arg_index]
    if indices is None:
        return MutationResult.rejected(store, "operand %d of %s has no decision role", arg_index, parent_id)
    remaining = [cell for cell in parent.cells if cell.index not in indices]
    spec = get_operator(parent.operator, registry)
    if spec is not None and len(remaining) < spec.min:
        return MutationResult.rejected(store, "operator %r needs at least %d operands", parent.operator, spec.min)
    if decision and not any(cell.role is not None and cell.role.is_condition for cell in remaining):
        return MutationResult.rejected(store, "the last condition of %s cannot be removed", parent_id)

    removed: set[str] = set()
    for index in indices:
        cell = parent.cells[index]
        if cell.is_branch and cell.branch_id is not None:
            removed.update(subtree_ids(store, cell.branch_id))

    cells = reindex_cells(remaining)
    if decision:
        cells = _relabel_first_condition(cells)
    updated = replace(parent, cells=cells, bare_operand=False)
    shifted = sync_children(store, updated)
    new_store = commit(store, [updated, *shifted], removed=removed, refresh_from=parent.id)
    logger.debug("Removed operand(s) %s of %s (%d nodes)", indices, parent.id, len(removed))
    return MutationResult(new_store, parent.id)


def _remove_val_segment(store: NodeStore, parent: VariableNode, index: int) -> MutationResult:
    segments = parent.segments
    if not 0 <= index < len(segments):
        return MutationResult.rejected(store, "%s has no path segment %d", parent.id, index)
    if len(segments) <= 1:
        return MutationResult.rejected(store, "the last path segment of %s cannot be removed", parent.id)
    updated: Node = replace(parent, path=segments[:index] + segments[index + 1 :])
    return MutationResult(commit(store, [updated], refresh_from=parent.parent_id), parent.id)
