"""Editor session: one store plus its history, selection and clipboard."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from . import _engine as engine
from ._builder import build_store
from ._clipboard import Clipboard
from ._engine import UNSET, MutationResult, NewNodeKind
from ._history import DEFAULT_HISTORY_LIMIT, History
from ._model import NodeStore, new_node_id
from ._projection import project_store
from ._registry import default_registry
from ._selection import Selection

if TYPE_CHECKING:
    from collections.abc import Callable

    from pydantic import JsonValue

    from ._registry import OperatorRegistry


logger = logging.getLogger(__name__)


class EditorSession:
    """Stateful host for an editing session.

    Every mutating method delegates to the engine and, when the operation
    applied, records the previous store in the history. Rejected operations
    leave both the store and the history untouched.

    Example:
        >>> session = EditorSession.from_expression({"+": [2, 3]})
        >>> session.add_argument(session.store.root.id).applied
        True
        >>> session.expression
        {'+': [2, 3, 0]}
        >>> session.undo()
        True
        >>> session.expression
        {'+': [2, 3]}

    """

    def __init__(
        self,
        store: NodeStore | None = None,
        *,
        registry: OperatorRegistry | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        inline_literals: bool = False,
        new_id: Callable[[], str] = new_node_id,
    ) -> None:
        self._store = store if store is not None else NodeStore.empty()
        self.registry = registry if registry is not None else default_registry()
        self.history = History(history_limit)
        self.selection = Selection()
        self.clipboard = Clipboard()
        self.inline_literals = inline_literals
        self._new_id = new_id

    @classmethod
    def from_expression(cls, expression: JsonValue, **kwargs: object) -> EditorSession:
        """Start a session on a parsed expression.

        Raises:
            ExpressionError: If `expression` is not a JSON value.

        """
        session = cls(**kwargs)  # type: ignore[arg-type]
        session.load(expression)
        return session

    @property
    def store(self) -> NodeStore:
        return self._store

    @property
    def expression(self) -> JsonValue:
        """Canonical expression of the primary root."""
        return project_store(self._store)

    def load(self, expression: JsonValue) -> None:
        """Replace the store with a parse of `expression` and forget the history."""
        self._store = build_store(
            expression,
            inline_literals=self.inline_literals,
            registry=self.registry,
            new_id=self._new_id,
        )
        self.history.clear()
        self.selection.clear()

    def _apply(self, result: MutationResult, *, select: bool = True) -> MutationResult:
        if not result.applied:
            return result
        self.history.push(self._store)
        self._store = result.store
        if select:
            self.selection.select(result.node_id)
        return result

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------

    def create_node(self, kind: NewNodeKind | str, operator_name: str | None = None) -> MutationResult:
        return self._apply(
            engine.create_node(self._store, kind, operator_name, registry=self.registry, new_id=self._new_id),
        )

    def add_argument(
        self,
        parent_id: str,
        node_kind: NewNodeKind | str = NewNodeKind.LITERAL,
        operator_name: str | None = None,
    ) -> MutationResult:
        return self._apply(
            engine.add_argument(
                self._store,
                parent_id,
                node_kind,
                operator_name,
                registry=self.registry,
                new_id=self._new_id,
            ),
        )

    def remove_argument(self, parent_id: str, arg_index: int) -> MutationResult:
        return self._apply(engine.remove_argument(self._store, parent_id, arg_index, registry=self.registry))

    def wrap_in_operator(self, node_id: str, operator_name: str) -> MutationResult:
        return self._apply(
            engine.wrap_in_operator(self._store, node_id, operator_name, registry=self.registry, new_id=self._new_id),
        )

    def insert_node_on_edge(self, source_id: str, target_id: str, operator_name: str) -> MutationResult:
        return self._apply(
            engine.insert_node_on_edge(
                self._store,
                source_id,
                target_id,
                operator_name,
                registry=self.registry,
                new_id=self._new_id,
            ),
        )

    def duplicate_node(self, node_id: str) -> MutationResult:
        return self._apply(
            engine.duplicate_node_tree(self._store, node_id, registry=self.registry, new_id=self._new_id),
        )

    def delete_node(self, node_id: str) -> MutationResult:
        result = self._apply(
            engine.delete_node_and_descendants(self._store, node_id, registry=self.registry),
            select=False,
        )
        if result.applied and self.selection.primary(self._store) is None:
            self.selection.clear()
        return result

    # ------------------------------------------------------------------
    # Value edits
    # ------------------------------------------------------------------

    def update_literal(self, node_id: str, value: JsonValue) -> MutationResult:
        return self._apply(engine.update_literal(self._store, node_id, value), select=False)

    def update_variable(self, node_id: str, **changes: object) -> MutationResult:
        """Edit an accessor; see `update_variable` for the accepted keywords."""
        kwargs = {name: changes.get(name, UNSET) for name in ("path", "default", "scope_jump")}
        return self._apply(
            engine.update_variable(
                self._store,
                node_id,
                clear_default=bool(changes.get("clear_default", False)),
                **kwargs,  # type: ignore[arg-type]
            ),
            select=False,
        )

    def set_cell_value(self, node_id: str, index: int, value: JsonValue) -> MutationResult:
        return self._apply(engine.set_cell_value(self._store, node_id, index, value), select=False)

    # ------------------------------------------------------------------
    # Clipboard
    # ------------------------------------------------------------------

    def copy(self, node_id: str | None = None) -> bool:
        """Copy `node_id`, or the primary selection when omitted."""
        target = node_id if node_id is not None else self.selection.primary(self._store)
        return target is not None and self.clipboard.copy(target, self._store)

    def paste(self, target_id: str | None = None) -> MutationResult:
        """Paste over `target_id`, or over the primary selection when omitted."""
        target = target_id if target_id is not None else self.selection.primary(self._store)
        return self._apply(self.clipboard.paste(target, self._store, new_id=self._new_id))

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def undo(self) -> bool:
        previous = self.history.undo(self._store)
        if previous is None:
            return False
        self._store = previous
        self.selection.clear()
        logger.debug("Undo: %d steps left", len(self.history))
        return True

    def redo(self) -> bool:
        following = self.history.redo(self._store)
        if following is None:
            return False
        self._store = following
        self.selection.clear()
        return True
