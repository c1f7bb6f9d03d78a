"""Tests for EditorSession."""

from collections.abc import Callable

import pytest

from rulegraph import EditorSession, ExpressionError, NewNodeKind, NodeStore


def _child_id(session: EditorSession, index: int) -> str:
    assert session.store.root is not None
    return session.store.children(session.store.root.id)[index].id


@pytest.fixture
def session(new_id: Callable[[], str]) -> EditorSession:
    return EditorSession.from_expression({"+": [2, 3]}, new_id=new_id)


class TestEditorSession:
    """Tests for mutation, history and selection bookkeeping."""

    def test_starts_empty(self) -> None:
        session = EditorSession()

        assert session.expression is None
        assert len(session.store) == 0
        assert not session.can_undo

    def test_from_expression_rejects_non_json(self) -> None:
        with pytest.raises(ExpressionError):
            EditorSession.from_expression({"in": [1, {2}]})

    def test_applied_mutation_is_recorded(self, session: EditorSession) -> None:
        before = session.store

        result = session.add_argument(session.store.root.id)  # type: ignore[union-attr]

        assert result.applied
        assert session.expression == {"+": [2, 3, 0]}
        assert session.can_undo
        assert session.selection.primary(session.store) == result.node_id
        assert session.undo()
        assert session.store is before

    def test_rejected_mutation_leaves_history_alone(self, session: EditorSession) -> None:
        before = session.store

        result = session.remove_argument(session.store.root.id, 7)  # type: ignore[union-attr]

        assert not result.applied
        assert session.store is before
        assert not session.can_undo

    def test_undo_redo_round_trip(self, session: EditorSession) -> None:
        session.wrap_in_operator(session.store.root.id, "abs")  # type: ignore[union-attr]
        session.add_argument(_child_id(session, 0))
        assert session.expression == {"abs": [{"+": [2, 3, 0]}]}

        assert session.undo()
        assert session.undo()
        assert not session.undo()
        assert session.expression == {"+": [2, 3]}

        assert session.redo()
        assert session.expression == {"abs": [{"+": [2, 3]}]}
        assert session.can_redo

    def test_mutating_expression_leaves_snapshots_intact(self) -> None:
        session = EditorSession.from_expression({"+": [{"var": ["x", [1, 2]]}, 1]})
        session.add_argument(session.store.root.id)  # type: ignore[union-attr]

        session.expression["+"][0]["var"][1].append(3)  # type: ignore[index]

        assert session.expression == {"+": [{"var": ["x", [1, 2]]}, 1, 0]}
        assert session.undo()
        assert session.expression == {"+": [{"var": ["x", [1, 2]]}, 1]}

    def test_new_edit_clears_redo(self, session: EditorSession) -> None:
        session.add_argument(session.store.root.id)  # type: ignore[union-attr]
        session.undo()

        session.add_argument(session.store.root.id, NewNodeKind.VARIABLE)  # type: ignore[union-attr]

        assert not session.can_redo
        assert session.expression == {"+": [2, 3, {"var": ""}]}

    def test_history_limit(self, new_id: Callable[[], str]) -> None:
        session = EditorSession.from_expression({"+": [1]}, history_limit=2, new_id=new_id)
        for _ in range(3):
            session.add_argument(session.store.root.id)  # type: ignore[union-attr]

        assert session.undo()
        assert session.undo()
        assert not session.undo()
        assert session.expression == {"+": [1, 0]}

    def test_delete_selected_node_clears_selection(self, session: EditorSession) -> None:
        target = _child_id(session, 0)
        session.selection.select(target)

        session.delete_node(target)

        assert session.expression == {"+": [3]}
        assert session.selection.primary(session.store) is None
        assert session.selection.selected_ids(session.store) == frozenset()

    def test_value_edits(self, session: EditorSession) -> None:
        session.update_literal(_child_id(session, 0), 20)
        session.create_node(NewNodeKind.OPERATOR, "var")
        assert session.expression == {"var": [{"+": [20, 3]}]}

        session.load({"var": "x"})
        session.update_variable(session.store.root.id, default=1)  # type: ignore[union-attr]
        assert session.expression == {"var": ["x", 1]}

        session.update_variable(session.store.root.id, clear_default=True)  # type: ignore[union-attr]
        assert session.expression == {"var": "x"}

    def test_load_forgets_history(self, session: EditorSession) -> None:
        session.add_argument(session.store.root.id)  # type: ignore[union-attr]

        session.load([1, 2])

        assert not session.can_undo
        assert session.expression == [1, 2]

    def test_copy_paste_uses_selection(self, session: EditorSession) -> None:
        session.selection.select(_child_id(session, 1))
        assert session.copy()

        session.selection.select(_child_id(session, 0))
        result = session.paste()

        assert result.applied
        assert session.expression == {"+": [3, 3]}
        assert session.selection.primary(session.store) == result.node_id

    def test_copy_without_selection(self) -> None:
        session = EditorSession(NodeStore.empty())

        assert not session.copy()

    def test_duplicate_and_insert_on_edge(self, session: EditorSession) -> None:
        root_id = session.store.root.id  # type: ignore[union-attr]

        session.duplicate_node(_child_id(session, 1))
        session.insert_node_on_edge(root_id, _child_id(session, 0), "__variable__")

        assert session.expression == {"+": [{"var": ""}, 3, 3]}
