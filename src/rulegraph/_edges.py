"""Layout edges derived from branch references."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ._graph import EdgeGraph
from ._model import OperatorNode, StructureNode

if TYPE_CHECKING:
    from ._model import NodeStore


@dataclass(frozen=True, slots=True)
class Edge:
    """A parent-to-child edge for the layout pass.

    Attributes:
        source: Parent node id.
        target: Child node id.
        source_handle: Handle on the parent the edge leaves from
            (``branch-<n>``).

    """

    source: str
    target: str
    source_handle: str

    @property
    def id(self) -> str:
        return f"{self.source}-{self.target}-{self.source_handle}"


def build_edges(store: NodeStore) -> list[Edge]:
    """Derive the edge list from the store.

    Operator edges use the cell index as handle. Structure edges number only
    the elements that hold an expression, because inline elements have no
    handle. Dangling references produce no edge.
    """
    edges: list[Edge] = []
    for node in store:
        match node:
            case OperatorNode():
                edges.extend(
                    Edge(node.id, cell.branch_id, f"branch-{cell.index}")
                    for cell in node.cells
                    if cell.is_branch and cell.branch_id in store
                )
            case StructureNode():
                branches = [cell for cell in node.cells if cell.is_branch]
                edges.extend(
                    Edge(node.id, cell.branch_id, f"branch-{ordinal}")
                    for ordinal, cell in enumerate(branches)
                    if cell.branch_id in store
                )
            case _:
                pass
    return edges


def build_edge_graph(store: NodeStore) -> EdgeGraph[str]:
    """Wrap the edge list into an `EdgeGraph`, including childless nodes."""
    return EdgeGraph.from_edges(
        [(edge.source, edge.target) for edge in build_edges(store)],
        nodes=[node.id for node in store],
    )
