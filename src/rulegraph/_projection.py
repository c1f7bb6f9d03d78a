"""Expression projection: node tree to canonical expression.

`project` computes a node's expression from scratch. `assemble` does the same
one level deep, reading the children's cached expressions; the engine uses it
through `refresh` to re-establish the caches of a mutated node and its
ancestors.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from ._enums import CellKind, CellRole
from ._model import LiteralNode, OperatorNode, StructureNode, VariableNode
from ._traversal import ancestor_ids

if TYPE_CHECKING:
    from collections.abc import Callable

    from pydantic import JsonValue

    from ._model import Cell, CompositeNode, Node, NodeStore

logger = logging.getLogger(__name__)


def cached_expression(node: Node) -> JsonValue:
    """The expression a node currently carries, without recomputation."""
    match node:
        case LiteralNode():
            return node.value
        case VariableNode():
            return node.expression
        case OperatorNode() | StructureNode():
            return node.expression


def format_expression(expression: JsonValue) -> str:
    """Compact single-line JSON text used as display text."""
    return json.dumps(expression, separators=(",", ":"), ensure_ascii=False)


def same_expression(left: JsonValue, right: JsonValue) -> bool:
    """Compare two expressions as JSON, so that `true` and `1` differ."""
    return left == right and format_expression(left) == format_expression(right)


def _cell_value(cell: Cell, child_value: Callable[[str], JsonValue]) -> JsonValue:
    if cell.kind is CellKind.BRANCH:
        # Cleared references project to null
        return child_value(cell.branch_id) if cell.branch_id is not None else None
    return cell.value


def _val_operands(node: OperatorNode, child_value: Callable[[str], JsonValue]) -> list[JsonValue]:
    operands: list[JsonValue] = []
    for cell in node.cells:
        if cell.kind is CellKind.EDITABLE and cell.role is CellRole.SCOPE:
            jump = cell.value if isinstance(cell.value, int) and not isinstance(cell.value, bool) else 0
            operands.append([-abs(jump)])
        elif cell.kind is CellKind.EDITABLE and isinstance(cell.value, str) and "." in cell.value:
            operands.extend(cell.value.split("."))
        else:
            operands.append(_cell_value(cell, child_value))
    return operands


def compose(node: CompositeNode, child_value: Callable[[str], JsonValue]) -> JsonValue:
    """Build a composite node's expression, resolving children through `child_value`."""
    match node:
        case OperatorNode():
            if node.operator == "val" and any(c.kind is CellKind.EDITABLE for c in node.cells):
                operands = _val_operands(node, child_value)
            else:
                operands = [_cell_value(cell, child_value) for cell in node.cells]
            if node.bare_operand and len(operands) == 1:
                return {node.operator: operands[0]}
            return {node.operator: operands}
        case StructureNode():
            if node.is_array:
                return [_cell_value(cell, child_value) for cell in node.cells]
            return {cell.key or "": _cell_value(cell, child_value) for cell in node.cells}


def project(node: Node, store: NodeStore) -> JsonValue:
    """Compute the canonical expression of a node and its whole subtree.

    Branch references that do not resolve (dangling, cleared, or revisited
    through a corrupted cycle) project to ``None``.

    Args:
        node: The node to project.
        store: Store used to resolve branch references.

    Returns:
        A JSON value that shares no objects with the store. Operator
        applications are single-key dicts.

    Example:
        >>> store = build_store({"+": [1, 2]})
        >>> project(store.root, store)
        {'+': [1, 2]}

    """
    # Inline cells and variable defaults share objects with the stored nodes
    return copy.deepcopy(_project(node, store, frozenset()))


def _project(node: Node, store: NodeStore, visiting: frozenset[str]) -> JsonValue:
    match node:
        case LiteralNode():
            return node.value
        case VariableNode():
            return node.expression
        case OperatorNode() | StructureNode():
            inner = visiting | {node.id}

            def child_value(child_id: str) -> JsonValue:
                child = store.get(child_id)
                if child is None or child_id in inner:
                    return None
                return _project(child, store, inner)

            return compose(node, child_value)


def assemble(node: Node, store: NodeStore) -> JsonValue:
    """Project a node from its own data and its children's cached expressions."""
    match node:
        case LiteralNode() | VariableNode():
            return node.expression
        case OperatorNode() | StructureNode():

            def child_value(child_id: str) -> JsonValue:
                child = store.get(child_id)
                return cached_expression(child) if child is not None else None

            return compose(node, child_value)


def project_store(store: NodeStore) -> JsonValue:
    """Project the primary root of the store, or ``None`` when it is empty."""
    root = store.root
    return project(root, store) if root is not None else None


def with_expression(node: CompositeNode, expression: JsonValue) -> CompositeNode:
    if isinstance(node, OperatorNode):
        return replace(node, expression=expression, expression_text=format_expression(expression))
    return replace(node, expression=expression)


def refresh(store: NodeStore, node_id: str | None) -> NodeStore:
    """Re-establish cached expressions for a node and all of its ancestors."""
    if node_id is None or node_id not in store:
        return store
    current = store
    for nid in [node_id, *ancestor_ids(store, node_id)]:
        node = current[nid]
        if not isinstance(node, OperatorNode | StructureNode):
            continue
        expression = assemble(node, current)
        if not same_expression(expression, node.expression):
            current = current.with_nodes([with_expression(node, expression)])
    return current


def refresh_all(store: NodeStore) -> NodeStore:
    """Recompute every cached expression in the store from scratch."""
    updated = []
    for node in store:
        if isinstance(node, OperatorNode | StructureNode):
            expression = project(node, store)
            if not same_expression(expression, node.expression):
                updated.append(with_expression(node, expression))
    if not updated:
        return store
    logger.debug("Refreshed %d cached expressions", len(updated))
    return store.with_nodes(updated)
