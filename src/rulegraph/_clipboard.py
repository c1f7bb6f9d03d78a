"""Copy and paste of subtrees."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from ._clone import clone_subtree
from ._engine import MutationResult
from ._engine._common import commit
from ._model import NodeStore, OperatorNode, StructureNode, new_node_id
from ._traversal import subtree_ids, subtree_nodes

if TYPE_CHECKING:
    from collections.abc import Callable

    from ._model import Node

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ClipboardPayload:
    """A copied subtree, kept with its original ids."""

    nodes: tuple[Node, ...]
    root_id: str


class Clipboard:
    """Holds at most one copied subtree.

    Pasting clones the payload with fresh ids each time, so the same payload
    can be pasted any number of times.
    """

    def __init__(self) -> None:
        self._payload: ClipboardPayload | None = None

    @property
    def payload(self) -> ClipboardPayload | None:
        return self._payload

    @property
    def has_content(self) -> bool:
        return self._payload is not None

    def clear(self) -> None:
        self._payload = None

    def copy(self, node_id: str, store: NodeStore) -> bool:
        """Copy a node and its descendants; returns False if the node is unknown."""
        nodes = subtree_nodes(store, node_id)
        if not nodes:
            return False
        self._payload = ClipboardPayload(nodes=tuple(nodes), root_id=node_id)
        logger.debug("Copied %d nodes rooted at %s", len(nodes), node_id)
        return True

    def paste(
        self,
        target_id: str | None,
        store: NodeStore,
        *,
        new_id: Callable[[], str] = new_node_id,
    ) -> MutationResult:
        """Paste the payload.

        Args:
            target_id: Node to replace. When it has a parent, the pasted copy
                takes its place and the target subtree is removed. When it is
                None, unknown, or a root, the copy replaces the whole store.
            store: The current store.
            new_id: Identifier factory.

        Returns:
            The new store and the id of the pasted root.

        """
        if self._payload is None:
            return MutationResult.rejected(store, "clipboard is empty")
        clone = clone_subtree(self._payload.nodes, self._payload.root_id, new_id)
        rest = [node for node in clone.nodes if node.id != clone.new_root_id]

        target = store.get(target_id)
        parent = store.get(target.parent_id) if target is not None else None
        if target is None or not isinstance(parent, OperatorNode | StructureNode):
            root_copy = replace(clone.root, parent_id=None, arg_index=None)
            logger.debug("Pasted %s as the new tree", root_copy.id)
            return MutationResult(NodeStore((root_copy, *rest)), root_copy.id)

        root_copy = replace(clone.root, parent_id=parent.id, arg_index=target.arg_index)
        new_store = commit(
            store,
            [parent.replace_reference(target.id, root_copy.id)],
            removed=set(subtree_ids(store, target.id)),
            added=[root_copy, *rest],
            before=target.id,
            refresh_from=parent.id,
        )
        logger.debug("Pasted %s in place of %s", root_copy.id, target.id)
        return MutationResult(new_store, root_copy.id)
