"""Generic ownership graph built from layout edges."""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from ._algorithms import parents_first_order

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class EdgeGraph(Generic[T]):
    """An immutable directed graph of "parent owns child" relationships.

    Unlike a plain dependency graph, children keep their slot order, so
    traversals come out in the same left-to-right order as the expression.

    Attributes:
        _children: Mapping from node to its ordered children.
        _parents: Mapping from node to the nodes referencing it. In a valid
            store every node has at most one parent.

    """

    _children: dict[T, tuple[T, ...]] = field(default_factory=dict)
    _parents: dict[T, tuple[T, ...]] = field(default_factory=dict)

    @classmethod
    def from_edges(cls, edges: list[tuple[T, T]], nodes: list[T] | None = None) -> "EdgeGraph[T]":
        """Build a graph from ordered (parent, child) edges.

        Args:
            edges: Edges in slot order.
            nodes: Extra nodes to include even if no edge touches them
                (e.g. a lone literal root).

        Example:
            >>> graph = EdgeGraph.from_edges([("r", "a"), ("r", "b")])
            >>> graph.children("r")
            ('a', 'b')

        """
        children: dict[T, list[T]] = {node: [] for node in nodes or ()}
        parents: dict[T, list[T]] = {node: [] for node in nodes or ()}
        for parent, child in edges:
            children.setdefault(parent, []).append(child)
            children.setdefault(child, [])
            parents.setdefault(child, []).append(parent)
            parents.setdefault(parent, [])
        return cls(
            _children={k: tuple(v) for k, v in children.items()},
            _parents={k: tuple(v) for k, v in parents.items()},
        )

    @property
    def nodes(self) -> frozenset[T]:
        return frozenset(self._children) | frozenset(self._parents)

    def children(self, node: T) -> tuple[T, ...]:
        return self._children.get(node, ())

    def parents(self, node: T) -> tuple[T, ...]:
        return self._parents.get(node, ())

    def roots(self) -> list[T]:
        """Nodes nothing points to, in insertion order."""
        return [n for n in self._children if not self._parents.get(n)]

    def order(self) -> list[T]:
        """Return nodes with every parent before its children.

        Raises:
            ValueError: If the graph contains a cycle.

        """
        return parents_first_order(self._children)

    def has_cycle(self) -> bool:
        try:
            self.order()
        except ValueError:
            return True
        return False

    def shared_nodes(self) -> list[T]:
        """Nodes referenced by more than one edge."""
        return [n for n, ps in self._parents.items() if len(ps) > 1]

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node: object) -> bool:
        return node in self._children or node in self._parents
