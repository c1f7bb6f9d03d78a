"""Tests for wrap, duplicate and insert-on-edge."""

from collections.abc import Callable

import pytest

from rulegraph import (
    NodeStore,
    OperatorNode,
    VariableNode,
    build_store,
    duplicate_node_tree,
    insert_node_on_edge,
    project_store,
    validate_store,
    wrap_in_operator,
)
from rulegraph._engine import LITERAL_PLACEHOLDER, VARIABLE_PLACEHOLDER


def _child_id(store: NodeStore, index: int) -> str:
    assert store.root is not None
    return store.children(store.root.id)[index].id


class TestWrapInOperator:
    """Tests for wrap_in_operator."""

    def test_wrap_root_in_unary(self, new_id: Callable[[], str]) -> None:
        store = build_store({"var": "age"}, new_id=new_id)
        var_id = store.root.id  # type: ignore[union-attr]

        result = wrap_in_operator(store, var_id, "!", new_id=new_id)

        assert project_store(result.store) == {"!": [{"var": "age"}]}
        wrapper = result.store.root
        assert isinstance(wrapper, OperatorNode)
        assert wrapper.id == result.node_id
        assert result.store[var_id].parent_id == wrapper.id
        assert result.store[var_id].arg_index == 0
        assert validate_store(result.store) == []

    def test_wrap_pads_to_minimum_arity(self) -> None:
        store = build_store({"var": "active"})

        result = wrap_in_operator(store, store.root.id, "and")  # type: ignore[union-attr]

        assert project_store(result.store) == {"and": [{"var": "active"}, True]}

    def test_wrap_child_takes_its_slot(self) -> None:
        store = build_store({"+": [1, {"var": "x"}, 3]})
        var_id = _child_id(store, 1)

        result = wrap_in_operator(store, var_id, "abs")

        assert project_store(result.store) == {"+": [1, {"abs": [{"var": "x"}]}, 3]}
        wrapper = result.store[result.node_id]  # type: ignore[index]
        assert wrapper.parent_id == store.root.id  # type: ignore[union-attr]
        assert wrapper.arg_index == 1
        assert validate_store(result.store) == []

    def test_wrap_in_decision_uses_roles(self) -> None:
        store = build_store({"var": "vip"})

        result = wrap_in_operator(store, store.root.id, "if")  # type: ignore[union-attr]

        assert project_store(result.store) == {"if": [{"var": "vip"}, 0]}

    def test_wrap_in_nullary_is_rejected(self) -> None:
        store = build_store({"var": "x"})

        result = wrap_in_operator(store, store.root.id, "now")  # type: ignore[union-attr]

        assert result.store is store
        assert not result.applied

    def test_wrap_unknown_node_is_rejected(self) -> None:
        store = build_store({"var": "x"})

        assert wrap_in_operator(store, "missing", "!").store is store


class TestDuplicateNodeTree:
    """Tests for duplicate_node_tree."""

    def test_copy_is_appended_to_operator(self) -> None:
        store = build_store({"+": [{"*": [2, 3]}, 1]})

        result = duplicate_node_tree(store, _child_id(store, 0))

        assert project_store(result.store) == {"+": [{"*": [2, 3]}, 1, {"*": [2, 3]}]}
        assert len(result.store) == len(store) + 3
        copy = result.store[result.node_id]  # type: ignore[index]
        assert copy.arg_index == 2
        assert validate_store(result.store) == []

    def test_copy_has_fresh_ids(self) -> None:
        store = build_store({"+": [{"*": [2, 3]}, 1]})

        result = duplicate_node_tree(store, _child_id(store, 0))

        assert len(result.store.ids) == len(result.store)
        assert store.ids <= result.store.ids

    def test_full_operator_is_rejected(self) -> None:
        store = build_store({"/": [1, 2]})

        result = duplicate_node_tree(store, _child_id(store, 0))

        assert result.store is store

    def test_root_copy_becomes_extra_root(self) -> None:
        store = build_store({"+": [1, 2]})

        result = duplicate_node_tree(store, store.root.id)  # type: ignore[union-attr]

        assert len(result.store.roots()) == 2
        # The primary root is unchanged
        assert result.store.root.id == store.root.id  # type: ignore[union-attr]
        assert project_store(result.store) == {"+": [1, 2]}
        assert validate_store(result.store) == []

    def test_decision_operand_copy_becomes_root(self) -> None:
        store = build_store({"if": [True, {"var": "a"}, "no"]})

        result = duplicate_node_tree(store, _child_id(store, 1))

        copy = result.store[result.node_id]  # type: ignore[index]
        assert copy.parent_id is None
        assert isinstance(copy, VariableNode)
        assert project_store(result.store) == {"if": [True, {"var": "a"}, "no"]}


class TestInsertNodeOnEdge:
    """Tests for insert_node_on_edge."""

    def test_operator_wraps_target(self) -> None:
        store = build_store({"+": [{"var": "x"}, 1]})

        result = insert_node_on_edge(store, store.root.id, _child_id(store, 0), "abs")  # type: ignore[union-attr]

        assert project_store(result.store) == {"+": [{"abs": [{"var": "x"}]}, 1]}

    @pytest.mark.parametrize(
        ("placeholder", "expected"),
        [
            (LITERAL_PLACEHOLDER, {"+": [0, 1]}),
            (VARIABLE_PLACEHOLDER, {"+": [{"var": ""}, 1]}),
        ],
    )
    def test_placeholder_replaces_target(self, placeholder: str, expected: object) -> None:
        store = build_store({"+": [{"*": [2, 3]}, 1]})

        result = insert_node_on_edge(store, store.root.id, _child_id(store, 0), placeholder)  # type: ignore[union-attr]

        assert project_store(result.store) == expected
        assert len(result.store) == 3
        assert result.store[result.node_id].arg_index == 0  # type: ignore[index]
        assert validate_store(result.store) == []

    def test_missing_edge_is_rejected(self) -> None:
        store = build_store({"+": [{"*": [2, 3]}, 1]})
        grandchild = store.children(_child_id(store, 0))[0].id

        result = insert_node_on_edge(store, store.root.id, grandchild, "abs")  # type: ignore[union-attr]

        assert result.store is store
