"""Structural transforms: wrap, duplicate and insert on an edge."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from rulegraph._clone import clone_subtree
from rulegraph._model import Cell, LiteralNode, OperatorNode, StructureNode, VariableNode, new_node_id
from rulegraph._registry import DECISION_OPERATORS, get_operator
from rulegraph._traversal import subtree_ids, subtree_nodes

from ._common import commit, operator_subtree
from ._result import MutationResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from rulegraph._model import Node, NodeStore
    from rulegraph._registry import OperatorRegistry

logger = logging.getLogger(__name__)

LITERAL_PLACEHOLDER = "__literal__"
VARIABLE_PLACEHOLDER = "__variable__"


def wrap_in_operator(
    store: NodeStore,
    node_id: str,
    operator_name: str,
    *,
    registry: OperatorRegistry | None = None,
    new_id: Callable[[], str] = new_node_id,
) -> MutationResult:
    """Wrap a node in a new operator.

    The wrapper takes over the node's place (parent and slot) and holds the
    node as operand 0. If the operator's minimum arity asks for more, default
    literals fill the remaining operands.

    Example:
        >>> store = build_store({"var": "age"})
        >>> project_store(wrap_in_operator(store, store.root.id, "!").store)
        {'!': [{'var': 'age'}]}

    """
    target = store.get(node_id)
    if target is None:
        return MutationResult.rejected(store, "%s is not in the store", node_id)
    subtree = operator_subtree(
        operator_name,
        parent_id=target.parent_id,
        arg_index=target.arg_index,
        new_id=new_id,
        registry=registry,
        leading=target,
    )
    if subtree is None:
        return MutationResult.rejected(store, "operator %r takes no operands", operator_name)
    wrapper, moved, *defaults = subtree

    updated: list[Node] = [moved]
    parent = store.get(target.parent_id)
    if isinstance(parent, OperatorNode | StructureNode):
        updated.append(parent.replace_reference(node_id, wrapper.id))
    new_store = commit(store, updated, added=[wrapper, *defaults], before=node_id, refresh_from=wrapper.id)
    logger.debug("Wrapped %s in %r as %s", node_id, operator_name, wrapper.id)
    return MutationResult(new_store, wrapper.id)


def duplicate_node_tree(
    store: NodeStore,
    node_id: str,
    *,
    registry: OperatorRegistry | None = None,
    new_id: Callable[[], str] = new_node_id,
) -> MutationResult:
    """Clone a node and its subtree with fresh ids.

    When the node is an operand of a non-decision operator that has room for
    one more operand, the copy is appended as a new trailing operand.
    Otherwise the copy becomes a standalone root.

    Returns:
        The new store and the id of the copy's root.

    """
    target = store.get(node_id)
    if target is None:
        return MutationResult.rejected(store, "%s is not in the store", node_id)
    clone = clone_subtree(subtree_nodes(store, node_id), node_id, new_id)
    root_copy = clone.root
    rest = [node for node in clone.nodes if node.id != clone.new_root_id]

    parent = store.get(target.parent_id)
    if isinstance(parent, OperatorNode) and parent.operator not in DECISION_OPERATORS:
        spec = get_operator(parent.operator, registry)
        if spec is not None and spec.max is not None and len(parent.cells) >= spec.max:
            return MutationResult.rejected(store, "operator %r already has %d operands", parent.operator, spec.max)
        index = len(parent.cells)
        root_copy = replace(root_copy, arg_index=index)
        updated = replace(parent, cells=(*parent.cells, Cell.branch(index, root_copy.id)), bare_operand=False)
        new_store = commit(store, [updated], added=[root_copy, *rest], refresh_from=parent.id)
    else:
        root_copy = replace(root_copy, parent_id=None, arg_index=None)
        new_store = commit(store, added=[root_copy, *rest])
    logger.debug("Duplicated %s as %s", node_id, root_copy.id)
    return MutationResult(new_store, root_copy.id)


def insert_node_on_edge(
    store: NodeStore,
    source_id: str,
    target_id: str,
    operator_name: str,
    *,
    registry: OperatorRegistry | None = None,
    new_id: Callable[[], str] = new_node_id,
) -> MutationResult:
    """Insert a node on the edge from `source_id` to its child `target_id`.

    An operator name wraps the target. The placeholders ``__literal__`` and
    ``__variable__`` replace the target subtree with a fresh literal or
    ``var`` accessor instead.
    """
    source = store.get(source_id)
    target = store.get(target_id)
    if not isinstance(source, OperatorNode | StructureNode) or target is None or target.parent_id != source_id:
        return MutationResult.rejected(store, "no edge from %s to %s", source_id, target_id)
    if operator_name not in (LITERAL_PLACEHOLDER, VARIABLE_PLACEHOLDER):
        return wrap_in_operator(store, target_id, operator_name, registry=registry, new_id=new_id)

    replacement: Node
    if operator_name == LITERAL_PLACEHOLDER:
        replacement = LiteralNode.of(0, id=new_id(), parent_id=source_id, arg_index=target.arg_index)
    else:
        replacement = VariableNode(id=new_id(), parent_id=source_id, arg_index=target.arg_index, operator="var")
    new_store = commit(
        store,
        [source.replace_reference(target_id, replacement.id)],
        removed=set(subtree_ids(store, target_id)),
        added=[replacement],
        before=target_id,
        refresh_from=source_id,
    )
    return MutationResult(new_store, replacement.id)
