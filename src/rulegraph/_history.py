"""Bounded undo/redo history of store snapshots."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._model import NodeStore

DEFAULT_HISTORY_LIMIT = 50


class History:
    """Undo and redo stacks of stores.

    Stores are immutable, so a snapshot is the store itself and consecutive
    snapshots share every node they have in common.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            msg = f"History limit must be positive, got {limit}"
            raise ValueError(msg)
        self._limit = limit
        self._undo: list[NodeStore] = []
        self._redo: list[NodeStore] = []

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def __len__(self) -> int:
        return len(self._undo)

    def push(self, store: NodeStore) -> None:
        """Record the state before a mutation; drops the redo stack."""
        self._undo.append(store)
        if len(self._undo) > self._limit:
            del self._undo[0]
        self._redo.clear()

    def undo(self, current: NodeStore) -> NodeStore | None:
        if not self._undo:
            return None
        self._redo.append(current)
        return self._undo.pop()

    def redo(self, current: NodeStore) -> NodeStore | None:
        if not self._redo:
            return None
        self._undo.append(current)
        return self._redo.pop()

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
