"""Creating standalone nodes."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from rulegraph._enums import CellRole
from rulegraph._model import Cell, LiteralNode, OperatorNode, VariableNode, new_node_id
from rulegraph._projection import cached_expression, compose, with_expression
from rulegraph._registry import get_operator

from ._common import NewNodeKind, commit, operator_subtree
from ._result import MutationResult
from ._transform import wrap_in_operator

if TYPE_CHECKING:
    from collections.abc import Callable

    from rulegraph._model import Node, NodeStore
    from rulegraph._registry import OperatorRegistry

logger = logging.getLogger(__name__)


def _condition(store: NodeStore, new_id: Callable[[], str], registry: OperatorRegistry | None) -> list[Node]:
    """Build ``if [true, <root or "yes">, "no"]``, adopting the current root."""
    node_id = new_id()
    root = store.root
    condition = LiteralNode.of(True, id=new_id(), parent_id=node_id, arg_index=0)  # noqa: FBT003
    then: Node = (
        LiteralNode.of("yes", id=new_id(), parent_id=node_id, arg_index=1)
        if root is None
        else replace(root, parent_id=node_id, arg_index=1)
    )
    otherwise = LiteralNode.of("no", id=new_id(), parent_id=node_id, arg_index=2)
    spec = get_operator("if", registry)
    children = {n.id: n for n in (condition, then, otherwise)}
    node = OperatorNode(
        id=node_id,
        operator="if",
        category=spec.category if spec is not None else "logical",
        cells=(
            Cell.branch(0, condition.id, role=CellRole.IF),
            Cell.branch(1, then.id, role=CellRole.THEN),
            Cell.branch(2, otherwise.id, role=CellRole.ELSE),
        ),
    )
    node = with_expression(node, compose(node, lambda child_id: cached_expression(children[child_id])))
    return [node, condition, then, otherwise]


def create_node(
    store: NodeStore,
    kind: NewNodeKind | str,
    operator_name: str | None = None,
    *,
    registry: OperatorRegistry | None = None,
    new_id: Callable[[], str] = new_node_id,
) -> MutationResult:
    """Create a node from the toolbar.

    On an empty store the new node becomes the root. Otherwise an operator
    wraps the current root, a condition adopts the current root as its then
    branch, and a literal or variable is added as an extra root.

    Returns:
        The new store and the id of the new node.

    """
    try:
        kind = NewNodeKind(kind)
    except ValueError:
        return MutationResult.rejected(store, "unknown node kind %r", kind)
    root = store.root

    match kind:
        case NewNodeKind.OPERATOR:
            if not operator_name:
                return MutationResult.rejected(store, "no operator name given")
            if root is not None:
                return wrap_in_operator(store, root.id, operator_name, registry=registry, new_id=new_id)
            nodes = operator_subtree(operator_name, parent_id=None, arg_index=None, new_id=new_id, registry=registry)
            if nodes is None:
                return MutationResult.rejected(store, "operator %r cannot be created", operator_name)
            new_store = commit(store, added=nodes)
        case NewNodeKind.CONDITION:
            nodes = _condition(store, new_id, registry)
            if root is None:
                new_store = commit(store, added=nodes)
            else:
                # The old root moves under the decision as its then branch
                adopted = nodes.pop(2)
                new_store = commit(store, [adopted], added=nodes, before=root.id)
        case NewNodeKind.LITERAL:
            nodes = [LiteralNode.of(0, id=new_id())]
            new_store = commit(store, added=nodes)
        case NewNodeKind.VARIABLE:
            nodes = [VariableNode(id=new_id(), operator="var", path="")]
            new_store = commit(store, added=nodes)

    logger.debug("Created %s node %s", kind, nodes[0].id)
    return MutationResult(new_store, nodes[0].id)
