"""Selection state, filtered against the live store on every read."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ._traversal import subtree_ids

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ._model import Node, NodeStore


class Selection:
    """A primary node plus a set of selected nodes.

    The raw state may name nodes that no longer exist (after an undo, for
    example); every read takes the store and ignores such ids.
    """

    def __init__(self) -> None:
        self._primary: str | None = None
        self._ids: set[str] = set()

    def select(self, node_id: str | None) -> None:
        """Make `node_id` the only selected node, or clear with None."""
        self._primary = node_id
        self._ids = {node_id} if node_id is not None else set()

    def set_selection(self, node_ids: Iterable[str]) -> None:
        ids = list(node_ids)
        self._ids = set(ids)
        self._primary = ids[0] if ids else None

    def toggle(self, node_id: str) -> None:
        if node_id in self._ids:
            self._ids.discard(node_id)
            if self._primary == node_id:
                self._primary = next(iter(self._ids), None)
        else:
            self._ids.add(node_id)
            self._primary = node_id

    def add(self, node_id: str) -> None:
        self._ids.add(node_id)
        if self._primary is None:
            self._primary = node_id

    def clear(self) -> None:
        self._primary = None
        self._ids = set()

    def select_all(self, store: NodeStore) -> None:
        self.set_selection(node.id for node in store)

    def select_children(self, node_id: str, store: NodeStore) -> None:
        """Select a node and all of its descendants."""
        ids = subtree_ids(store, node_id)
        if ids:
            self.set_selection(ids)

    def primary(self, store: NodeStore) -> str | None:
        return self._primary if self._primary in store else None

    def selected_ids(self, store: NodeStore) -> frozenset[str]:
        return frozenset(nid for nid in self._ids if nid in store)

    def selected_nodes(self, store: NodeStore) -> list[Node]:
        """Selected nodes in store order."""
        return [node for node in store if node.id in self._ids]

    def is_selected(self, node_id: str, store: NodeStore) -> bool:
        return node_id in self._ids and node_id in store
