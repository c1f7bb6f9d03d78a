"""Tests for cascading delete."""

from rulegraph import (
    NodeStore,
    OperatorNode,
    build_store,
    delete_node_and_descendants,
    project_store,
    validate_store,
)


def _child_id(store: NodeStore, index: int) -> str:
    assert store.root is not None
    return store.children(store.root.id)[index].id


class TestDeleteNodeAndDescendants:
    """Tests for delete_node_and_descendants."""

    def test_drops_slot_and_shifts_siblings(self) -> None:
        store = build_store({"+": [1, 2, 3]})
        last_id = _child_id(store, 2)

        result = delete_node_and_descendants(store, _child_id(store, 1))

        assert project_store(result.store) == {"+": [1, 3]}
        assert result.store[last_id].arg_index == 1
        assert validate_store(result.store) == []

    def test_node_of_interest_is_deleted_node(self) -> None:
        store = build_store({"+": [1, 2]})
        target = _child_id(store, 0)

        result = delete_node_and_descendants(store, target)

        assert result.node_id == target
        assert target not in result.store

    def test_descendants_are_removed(self) -> None:
        store = build_store({"and": [{"<": [{"var": "a"}, 1]}, True]})
        comparison = _child_id(store, 0)
        doomed = {comparison, *(node.id for node in store.children(comparison))}

        result = delete_node_and_descendants(store, comparison)

        assert not doomed & result.store.ids
        assert len(result.store) == 2

    def test_minimum_arity_keeps_cleared_slot(self) -> None:
        store = build_store({"+": [5]})

        result = delete_node_and_descendants(store, _child_id(store, 0))

        assert project_store(result.store) == {"+": [None]}
        root = result.store.root
        assert isinstance(root, OperatorNode)
        assert root.cells[0].branch_id is None
        assert validate_store(result.store) == []

    def test_binary_operand_keeps_cleared_slot(self) -> None:
        store = build_store({"/": [{"var": "total"}, 2]})

        result = delete_node_and_descendants(store, _child_id(store, 0))

        assert project_store(result.store) == {"/": [None, 2]}

    def test_decision_condition_is_cleared(self) -> None:
        store = build_store({"if": [{"var": "vip"}, "yes", "no"]})

        result = delete_node_and_descendants(store, _child_id(store, 0))

        assert project_store(result.store) == {"if": [None, "yes", "no"]}

    def test_decision_else_is_dropped(self) -> None:
        store = build_store({"if": [{"var": "vip"}, "yes", "no"]})

        result = delete_node_and_descendants(store, _child_id(store, 2))

        assert project_store(result.store) == {"if": [{"var": "vip"}, "yes"]}
        assert validate_store(result.store) == []

    def test_structure_element_is_dropped(self) -> None:
        store = build_store({"total": {"var": "x"}, "label": "sum"})

        result = delete_node_and_descendants(store, _child_id(store, 0))

        assert project_store(result.store) == {"label": "sum"}

    def test_root_deletion_empties_store(self) -> None:
        store = build_store({"+": [1, {"*": [2, 3]}]})

        result = delete_node_and_descendants(store, store.root.id)  # type: ignore[union-attr]

        assert len(result.store) == 0
        assert project_store(result.store) is None

    def test_unknown_node_is_rejected(self) -> None:
        store = build_store({"+": [1, 2]})

        result = delete_node_and_descendants(store, "missing")

        assert result.store is store
        assert not result.applied
