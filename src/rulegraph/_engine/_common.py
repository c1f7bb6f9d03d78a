"""Helpers shared by engine operations."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from rulegraph._enums import StrEnumWithDoc
from rulegraph._model import Cell, LiteralNode, OperatorNode, VariableNode
from rulegraph._projection import cached_expression, compose, refresh, with_expression
from rulegraph._registry import DECISION_OPERATORS, decision_roles, default_value, get_operator

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Iterable

    from pydantic import JsonValue

    from rulegraph._model import CompositeNode, Node, NodeStore
    from rulegraph._registry import OperatorRegistry


class NewNodeKind(StrEnumWithDoc):
    """What kind of node an editing operation should create."""

    LITERAL = "literal", "Literal with a category default value"
    VARIABLE = "variable", "var accessor with an empty path"
    OPERATOR = "operator", "Operator with default operands"
    CONDITION = "condition", "if/then/else decision"


def sync_children(store: NodeStore, parent: CompositeNode) -> list[Node]:
    """Return children whose back-references disagree with `parent`'s cells, corrected."""
    fixed: list[Node] = []
    for cell in parent.cells:
        if not cell.is_branch or cell.branch_id is None:
            continue
        child = store.get(cell.branch_id)
        if child is not None and (child.parent_id != parent.id or child.arg_index != cell.index):
            fixed.append(replace(child, parent_id=parent.id, arg_index=cell.index))
    return fixed


def commit(
    store: NodeStore,
    updated: Iterable[Node] = (),
    *,
    removed: Collection[str] = (),
    added: Iterable[Node] = (),
    before: str | None = None,
    refresh_from: str | None = None,
) -> NodeStore:
    """Apply node changes and re-project from `refresh_from` up to its root."""
    new_store = store.with_nodes(updated, removed=removed, added=added, before=before)
    return refresh(new_store, refresh_from)


def _cached(node: OperatorNode, nodes: Iterable[Node]) -> OperatorNode:
    by_id = {n.id: n for n in nodes}
    return with_expression(node, compose(node, lambda child_id: cached_expression(by_id[child_id])))  # type: ignore[return-value]


def operand_default(category: str, *, condition: bool = False) -> JsonValue:
    return True if condition else default_value(category)


def operator_subtree(
    operator: str,
    *,
    parent_id: str | None,
    arg_index: int | None,
    new_id: Callable[[], str],
    registry: OperatorRegistry | None = None,
    leading: Node | None = None,
) -> list[Node] | None:
    """Create an operator node together with default operands.

    The operator receives enough default literal operands to satisfy its
    minimum arity, and at least one operand when its maximum allows. When
    `leading` is given it becomes operand 0 (re-parented under the new node)
    and is returned in the list too.

    Returns:
        The new operator node followed by its children, or None when the
        operator cannot take the requested operands.

    """
    spec = get_operator(operator, registry)
    category = spec.category if spec is not None else ""
    count = max(spec.min if spec is not None else 0, 1)
    if spec is not None and spec.max is not None:
        count = min(count, spec.max)
    if leading is not None and count < 1:
        return None

    node_id = new_id()
    decision = operator in DECISION_OPERATORS
    roles = decision_roles(count) if decision else [None] * count
    children: list[Node] = []
    cells: list[Cell] = []
    for index, role in enumerate(roles):
        if index == 0 and leading is not None:
            child: Node = replace(leading, parent_id=node_id, arg_index=0)
        else:
            value = operand_default(category, condition=role is not None and role.is_condition)
            child = LiteralNode.of(value, id=new_id(), parent_id=node_id, arg_index=index)
        children.append(child)
        cells.append(Cell.branch(index, child.id, role=role))

    node = OperatorNode(
        id=node_id,
        parent_id=parent_id,
        arg_index=arg_index,
        operator=operator,
        category=category,
        cells=tuple(cells),
    )
    return [_cached(node, children), *children]


def argument_nodes(
    kind: NewNodeKind | str,
    *,
    parent_id: str,
    arg_index: int,
    category: str,
    new_id: Callable[[], str],
    operator_name: str | None = None,
    registry: OperatorRegistry | None = None,
) -> list[Node] | None:
    """Create the node(s) for a new operand; the first node is the operand itself."""
    match NewNodeKind(kind):
        case NewNodeKind.VARIABLE:
            return [VariableNode(id=new_id(), parent_id=parent_id, arg_index=arg_index, operator="var", path="")]
        case NewNodeKind.OPERATOR if operator_name:
            return operator_subtree(
                operator_name,
                parent_id=parent_id,
                arg_index=arg_index,
                new_id=new_id,
                registry=registry,
            )
        case NewNodeKind.LITERAL | NewNodeKind.OPERATOR:
            # An operator without a name falls back to a literal
            return [LiteralNode.of(default_value(category), id=new_id(), parent_id=parent_id, arg_index=arg_index)]
        case NewNodeKind.CONDITION:
            return operator_subtree(
                "if",
                parent_id=parent_id,
                arg_index=arg_index,
                new_id=new_id,
                registry=registry,
            )
