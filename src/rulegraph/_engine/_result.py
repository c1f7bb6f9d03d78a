"""Result type of engine operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rulegraph._model import NodeStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MutationResult:
    """Outcome of an engine operation.

    Attributes:
        store: The new store, or the very same store object when the
            operation was rejected.
        node_id: The node of interest (the new node or the affected parent),
            or None when nothing happened.

    """

    store: NodeStore
    node_id: str | None = None

    @property
    def applied(self) -> bool:
        return self.node_id is not None

    @classmethod
    def rejected(cls, store: NodeStore, reason: str, *args: object) -> MutationResult:
        """Build a no-op result and log why the operation did not apply."""
        logger.debug("Mutation rejected: " + reason, *args)  # noqa: G003
        return cls(store=store)
