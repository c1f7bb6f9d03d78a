"""Kind-aware traversal of the node store."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING

from ._graph import reachable
from ._model import child_ids

if TYPE_CHECKING:
    from ._model import Node, NodeStore


class LiveChildren(Mapping[str, tuple[str, ...]]):
    """Read-only view mapping a node id to the ids of its live children.

    References to ids missing from the store are left out, so walks over the
    view never step onto a dangling reference.
    """

    def __init__(self, store: NodeStore) -> None:
        self._store = store

    def __getitem__(self, node_id: str) -> tuple[str, ...]:
        node = self._store[node_id]
        return tuple(cid for cid in child_ids(node) if cid in self._store)

    def __iter__(self) -> Iterator[str]:
        return (node.id for node in self._store)

    def __len__(self) -> int:
        return len(self._store)


def descendant_ids(store: NodeStore, node_id: str) -> list[str]:
    """Ids of every node reachable from `node_id`, in pre-order, excluding it."""
    if node_id not in store:
        return []
    return reachable(LiveChildren(store), node_id)


def subtree_ids(store: NodeStore, node_id: str) -> list[str]:
    """The node followed by its descendants; empty if the node is unknown."""
    if node_id not in store:
        return []
    return [node_id, *descendant_ids(store, node_id)]


def subtree_nodes(store: NodeStore, node_id: str) -> list[Node]:
    return [store[nid] for nid in subtree_ids(store, node_id)]


def ancestor_ids(store: NodeStore, node_id: str) -> list[str]:
    """Ids from the node's parent up to its root."""
    chain: list[str] = []
    seen = {node_id}
    node = store.get(node_id)
    while node is not None and node.parent_id is not None and node.parent_id not in seen:
        seen.add(node.parent_id)
        chain.append(node.parent_id)
        node = store.get(node.parent_id)
    return [nid for nid in chain if nid in store]
