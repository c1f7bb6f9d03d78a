"""Rich rendering of stores, edges and the operator registry."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from rulegraph._enums import CellKind, NodeKind
from rulegraph._model import LiteralNode, OperatorNode, StructureNode, VariableNode

if TYPE_CHECKING:
    from rich.console import Console

    from rulegraph._edges import Edge
    from rulegraph._model import Cell, Node, NodeStore
    from rulegraph._registry import OperatorRegistry


def _get_kind_style(kind: NodeKind) -> str:
    """Get Rich style for a node kind."""
    match kind:
        case NodeKind.LITERAL:
            return "green"
        case NodeKind.VARIABLE:
            return "cyan"
        case NodeKind.OPERATOR:
            return "yellow"
        case NodeKind.STRUCTURE:
            return "magenta"


def _short(value: object, limit: int = 40) -> str:
    text = json.dumps(value, ensure_ascii=False)
    return escape(text if len(text) <= limit else text[: limit - 3] + "...")


def _node_label(node: Node, prefix: str = "") -> str:
    style = _get_kind_style(node.kind)
    match node:
        case LiteralNode():
            body = f"{_short(node.value)} [dim]{node.value_type}[/dim]"
        case VariableNode():
            body = _short(node.expression)
        case OperatorNode():
            body = f"[bold]{escape(node.operator)}[/bold]"
        case StructureNode():
            body = "[...]" if node.is_array else "{...}"
            body = escape(body)
    return f"{prefix}[{style}]{node.kind.upper()}[/{style}] {body}"


def _cell_prefix(cell: Cell) -> str:
    parts = [str(cell.index)]
    if cell.label is not None:
        parts.append(cell.label)
    if cell.key is not None:
        parts.append(repr(cell.key))
    return f"[dim]{escape(' '.join(parts))}:[/dim] "


def _add_children(tree: Tree, node: Node, store: NodeStore) -> None:
    if not isinstance(node, OperatorNode | StructureNode):
        return
    for cell in node.cells:
        prefix = _cell_prefix(cell)
        if cell.kind is not CellKind.BRANCH:
            tree.add(f"{prefix}[dim]{cell.kind}[/dim] {_short(cell.value)}")
            continue
        child = store.get(cell.branch_id)
        if child is None:
            tree.add(f"{prefix}[red]empty[/red]")
            continue
        _add_children(tree.add(_node_label(child, prefix)), child, store)


def render_store_tree(store: NodeStore, console: Console) -> None:
    """Render every tree of the store, one rich Tree per root.

    Args:
        store: Store to render.
        console: Rich Console to output to.

    """
    roots = store.roots()
    if not roots:
        console.print("[dim]Empty expression[/dim]")
        return
    for root in roots:
        tree = Tree(_node_label(root))
        _add_children(tree, root, store)
        console.print(tree)


def render_edge_table(edges: list[Edge], store: NodeStore, console: Console) -> None:
    """Render layout edges as a Rich table.

    Args:
        edges: Edges to render.
        store: Store used to describe the endpoints.
        console: Rich Console to output to.

    """
    if not edges:
        console.print("[dim]No edges[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Source")
    table.add_column("Handle", style="dim")
    table.add_column("Target")
    for edge in edges:
        table.add_row(_node_label(store[edge.source]), edge.source_handle, _node_label(store[edge.target]))
    console.print(table)
    console.print(f"\n[dim]Total: {len(edges)} edges[/dim]")


def render_operator_table(registry: OperatorRegistry, console: Console) -> None:
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Operator", style="bold")
    table.add_column("Label")
    table.add_column("Category")
    table.add_column("Arity")
    table.add_column("Operands", justify="right")

    for spec in sorted(registry, key=lambda s: (s.category, s.name)):
        bounds = f"{spec.min}..{spec.max}" if spec.max is not None else f"{spec.min}+"
        table.add_row(escape(spec.name), escape(spec.label), spec.category, str(spec.arity), bounds)
    console.print(table)
