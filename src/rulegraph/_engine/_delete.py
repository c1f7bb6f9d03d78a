"""Cascading delete."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from rulegraph._enums import CellRole
from rulegraph._model import OperatorNode, StructureNode, reindex_cells
from rulegraph._registry import DECISION_OPERATORS, get_operator
from rulegraph._traversal import subtree_ids

from ._common import commit, sync_children
from ._result import MutationResult

if TYPE_CHECKING:
    from rulegraph._model import CompositeNode, Node, NodeStore
    from rulegraph._registry import OperatorRegistry

logger = logging.getLogger(__name__)


def _detach(parent: CompositeNode, node_id: str, registry: OperatorRegistry | None) -> CompositeNode:
    position = next((i for i, cell in enumerate(parent.cells) if cell.branch_id == node_id), None)
    if position is None:
        return parent
    cell = parent.cells[position]
    if isinstance(parent, OperatorNode):
        spec = get_operator(parent.operator, registry)
        mandatory = parent.operator in DECISION_OPERATORS and cell.role is not CellRole.ELSE
        below_min = spec is not None and len(parent.cells) - 1 < spec.min
        if mandatory or below_min:
            # Keep the slot; the caller fills it in later
            cells = (*parent.cells[:position], replace(cell, branch_id=None), *parent.cells[position + 1 :])
            return replace(parent, cells=cells)
        cells = reindex_cells(parent.cells[:position] + parent.cells[position + 1 :])
        return replace(parent, cells=cells, bare_operand=False)
    return replace(parent, cells=reindex_cells(parent.cells[:position] + parent.cells[position + 1 :]))


def delete_node_and_descendants(
    store: NodeStore,
    node_id: str,
    *,
    registry: OperatorRegistry | None = None,
) -> MutationResult:
    """Delete a node together with everything reachable from it.

    The parent is patched so the store stays consistent: structure parents
    drop the element, operator parents drop the slot and close the gap.
    When dropping the slot would break the operator's minimum arity, or the
    slot is a condition or then branch of a decision, the slot stays with
    its reference cleared and projects as ``null``.

    Args:
        store: The current store.
        node_id: Id of the node to delete. Roots may be deleted.
        registry: Operator registry; defaults to the built-in one.

    Returns:
        The new store and the id of the deleted node.

    """
    target = store.get(node_id)
    if target is None:
        return MutationResult.rejected(store, "%s is not in the store", node_id)
    doomed = set(subtree_ids(store, node_id))
    parent = store.get(target.parent_id)

    updated: list[Node] = []
    refresh_from = None
    if isinstance(parent, OperatorNode | StructureNode) and parent.id not in doomed:
        patched = _detach(parent, node_id, registry)
        updated = [patched, *sync_children(store, patched)]
        refresh_from = parent.id

    new_store = commit(store, updated, removed=doomed, refresh_from=refresh_from)
    logger.debug("Deleted %s with %d descendants", node_id, len(doomed) - 1)
    return MutationResult(new_store, node_id)
