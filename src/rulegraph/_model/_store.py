"""The node store: an immutable, ordered collection of nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._nodes import child_ids

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Iterator

    from ._nodes import Node


@dataclass(frozen=True, slots=True)
class NodeStore:
    """Ordered collection of nodes forming one or more trees.

    The store is a value. Every mutation builds a new store through
    `with_nodes`; the previous store stays valid, which is what makes
    history snapshots free.

    Example:
        >>> store = NodeStore((LiteralNode.of(1, id="a"),))
        >>> store["a"].value
        1

    """

    nodes: tuple[Node, ...] = ()
    _index: dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_index", {node.id: i for i, node in enumerate(self.nodes)})

    def get(self, node_id: str | None) -> Node | None:
        if node_id is None:
            return None
        i = self._index.get(node_id)
        return self.nodes[i] if i is not None else None

    def __getitem__(self, node_id: str) -> Node:
        node = self.get(node_id)
        if node is None:
            raise KeyError(node_id)
        return node

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._index)

    def roots(self) -> list[Node]:
        """Nodes without a parent, in store order."""
        return [node for node in self.nodes if node.parent_id is None]

    @property
    def root(self) -> Node | None:
        """The primary root (first root in store order)."""
        return next((node for node in self.nodes if node.parent_id is None), None)

    def parent(self, node_id: str) -> Node | None:
        node = self.get(node_id)
        return self.get(node.parent_id) if node is not None else None

    def children(self, node_id: str) -> list[Node]:
        """Live children of a node in slot order; dangling references are skipped."""
        node = self.get(node_id)
        if node is None:
            return []
        return [child for cid in child_ids(node) if (child := self.get(cid)) is not None]

    def with_nodes(
        self,
        updated: Iterable[Node] = (),
        *,
        removed: Collection[str] = (),
        added: Iterable[Node] = (),
        before: str | None = None,
    ) -> NodeStore:
        """Return a new store with nodes replaced, removed and added.

        Args:
            updated: Replacement nodes, matched to existing nodes by id.
            removed: Ids of nodes to drop.
            added: New nodes. They are inserted at the position of `before`
                when given (even if that node is being removed), and appended
                otherwise.
            before: Anchor id for `added`.

        Returns:
            The new store. The receiver is left unchanged.

        """
        replacements = {node.id: node for node in updated}
        new_nodes = list(added)
        result: list[Node] = []
        inserted = before is None or before not in self._index
        for node in self.nodes:
            if not inserted and node.id == before:
                result.extend(new_nodes)
                inserted = True
            if node.id in removed:
                continue
            result.append(replacements.get(node.id, node))
        if before is None or before not in self._index:
            result.extend(new_nodes)
        return NodeStore(tuple(result))

    @classmethod
    def empty(cls) -> NodeStore:
        return cls(())
