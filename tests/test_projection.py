"""Tests for expression projection and cache refresh."""

from collections.abc import Callable
from dataclasses import replace

from rulegraph import (
    Cell,
    CellKind,
    CellRole,
    LiteralNode,
    NodeStore,
    OperatorNode,
    StructureNode,
    VariableNode,
    build_store,
    project,
    project_store,
    refresh,
)
from rulegraph._projection import assemble, refresh_all, same_expression


def _operator(node_id: str, *cells: Cell, operator: str = "+", parent_id: str | None = None) -> OperatorNode:
    return OperatorNode(id=node_id, operator=operator, cells=cells, parent_id=parent_id)


class TestProject:
    """Tests for the projection of each node kind."""

    def test_empty_store_projects_to_none(self) -> None:
        assert project_store(NodeStore.empty()) is None

    def test_variable_call_forms(self) -> None:
        assert VariableNode(id="v", operator="var", path="a").expression == {"var": "a"}
        assert VariableNode(id="v", operator="var", path="a", default=0, has_default=True).expression == {
            "var": ["a", 0],
        }
        assert VariableNode(id="v", operator="val", path=("a", "b")).expression == {"val": ["a", "b"]}
        assert VariableNode(id="v", operator="val", path=("a",), scope_jump=1).expression == {"val": [[-1], "a"]}
        assert VariableNode(id="v", operator="exists", path="a").expression == {"exists": "a"}

    def test_cleared_branch_projects_null(self) -> None:
        store = NodeStore((_operator("op", Cell.branch(0, None)),))

        assert project(store["op"], store) == {"+": [None]}

    def test_dangling_branch_projects_null(self) -> None:
        store = NodeStore((_operator("op", Cell.branch(0, "missing"), Cell.inline(1, 2)),))

        assert project(store["op"], store) == {"+": [None, 2]}

    def test_reference_cycle_terminates(self) -> None:
        store = NodeStore(
            (
                _operator("a", Cell.branch(0, "b")),
                _operator("b", Cell.branch(0, "a"), parent_id="a"),
            ),
        )

        assert project(store["a"], store) == {"+": [{"+": [None]}]}

    def test_object_structure(self) -> None:
        store = NodeStore(
            (
                StructureNode(
                    id="s",
                    is_array=False,
                    cells=(Cell.inline(0, 1, key="one"), Cell.branch(1, "v", key="x")),
                ),
                VariableNode(id="v", parent_id="s", arg_index=1, operator="var", path="x"),
            ),
        )

        assert project_store(store) == {"one": 1, "x": {"var": "x"}}

    def test_val_editable_cells(self) -> None:
        node = _operator(
            "val",
            Cell(kind=CellKind.EDITABLE, index=0, value=2, role=CellRole.SCOPE, field_id="scope"),
            Cell(kind=CellKind.EDITABLE, index=1, value="user.name", role=CellRole.PATH, field_id="path"),
            operator="val",
        )
        store = NodeStore((node,))

        assert project_store(store) == {"val": [[-2], "user", "name"]}

    def test_projection_returns_copies(self) -> None:
        store = build_store({"in": ["a", ["a", "b"]]})

        result = project_store(store)
        result["in"][1].append("c")  # type: ignore[index]

        assert project_store(store) == {"in": ["a", ["a", "b"]]}

    def test_inline_cell_is_not_shared(self) -> None:
        store = build_store([{"var": "a"}, [1, 2]])

        result = project_store(store)
        result[1].append(99)  # type: ignore[index]

        assert project_store(store) == [{"var": "a"}, [1, 2]]

    def test_variable_default_is_not_shared(self) -> None:
        store = build_store({"+": [{"var": ["x", [1, 2]]}, 1]})
        variable = next(node for node in store if isinstance(node, VariableNode))

        result = project(variable, store)
        result["var"][1].append(3)  # type: ignore[index]

        assert variable.default == [1, 2]
        assert project_store(store) == {"+": [{"var": ["x", [1, 2]]}, 1]}


class TestRefresh:
    """Tests for re-establishing cached expressions."""

    def test_refresh_updates_ancestors(self, new_id: Callable[[], str]) -> None:
        store = build_store({"+": [{"*": [2, 3]}, 1]}, new_id=new_id)
        two = next(node for node in store if isinstance(node, LiteralNode) and node.value == 2)
        edited = store.with_nodes([replace(two, value=5)])

        refreshed = refresh(edited, two.id)

        assert refreshed.root.expression == {"+": [{"*": [5, 3]}, 1]}  # type: ignore[union-attr]
        # The input store is a value and keeps its stale cache
        assert edited.root.expression == {"+": [{"*": [2, 3]}, 1]}  # type: ignore[union-attr]

    def test_refresh_distinguishes_true_from_one(self) -> None:
        store = build_store({"==": [1, 1]})
        first = store.children(store.root.id)[0]  # type: ignore[union-attr]
        edited = store.with_nodes([replace(first, value=True)])

        refreshed = refresh(edited, store.root.id)  # type: ignore[union-attr]

        assert refreshed.root.expression_text == "{\"==\":[true,1]}"  # type: ignore[union-attr]

    def test_refresh_unknown_node_is_noop(self) -> None:
        store = build_store({"+": [1]})
        assert refresh(store, "missing") is store

    def test_refresh_all(self) -> None:
        store = NodeStore(
            (
                _operator("op", Cell.branch(0, "lit")),
                LiteralNode.of(7, id="lit", parent_id="op", arg_index=0),
            ),
        )
        assert store["op"].expression is None  # type: ignore[union-attr]

        refreshed = refresh_all(store)

        assert refreshed["op"].expression == {"+": [7]}  # type: ignore[union-attr]
        assert assemble(refreshed["op"], refreshed) == {"+": [7]}


def test_same_expression_is_type_strict() -> None:
    assert same_expression({"a": [1, 2]}, {"a": [1, 2]})
    assert not same_expression(True, 1)
    assert not same_expression([1], [1.0])
