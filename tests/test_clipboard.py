"""Tests for subtree cloning and the clipboard."""

from collections.abc import Callable

import pytest

from rulegraph import Clipboard, NodeStore, build_store, clone_subtree, project_store, validate_store
from rulegraph._traversal import subtree_nodes


def _child_id(store: NodeStore, index: int) -> str:
    assert store.root is not None
    return store.children(store.root.id)[index].id


class TestCloneSubtree:
    """Tests for clone_subtree."""

    def test_clone_is_isomorphic_with_fresh_ids(self, new_id: Callable[[], str]) -> None:
        store = build_store({"+": [1, {"*": [2, 3]}]})
        product = _child_id(store, 1)
        originals = subtree_nodes(store, product)

        clone = clone_subtree(originals, product, new_id)

        assert len(clone.nodes) == 3
        assert set(clone.id_map) == {node.id for node in originals}
        assert not {node.id for node in clone.nodes} & store.ids
        assert clone.new_root_id == clone.id_map[product]
        # Internal references follow the renaming
        children = [clone.id_map[node.id] for node in originals[1:]]
        assert [cell.branch_id for cell in clone.root.cells] == children  # type: ignore[union-attr]
        assert all(node.parent_id == clone.new_root_id for node in clone.nodes[1:])

    def test_root_keeps_outside_parent(self) -> None:
        store = build_store({"+": [1, {"*": [2, 3]}]})
        product = _child_id(store, 1)

        clone = clone_subtree(subtree_nodes(store, product), product)

        assert clone.root.parent_id == store.root.id  # type: ignore[union-attr]

    def test_unknown_root_raises(self) -> None:
        store = build_store({"+": [1, 2]})

        with pytest.raises(KeyError):
            clone_subtree(store.nodes, "missing")


class TestClipboard:
    """Tests for Clipboard copy and paste."""

    def test_starts_empty(self) -> None:
        clipboard = Clipboard()

        assert not clipboard.has_content
        assert clipboard.payload is None

    def test_copy_unknown_node(self) -> None:
        clipboard = Clipboard()

        assert not clipboard.copy("missing", build_store({"+": [1, 2]}))
        assert not clipboard.has_content

    def test_paste_replaces_target(self) -> None:
        store = build_store({"+": [{"var": "a"}, {"*": [2, 3]}]})
        clipboard = Clipboard()
        assert clipboard.copy(_child_id(store, 1), store)

        result = clipboard.paste(_child_id(store, 0), store)

        assert project_store(result.store) == {"+": [{"*": [2, 3]}, {"*": [2, 3]}]}
        pasted = result.store[result.node_id]  # type: ignore[index]
        assert pasted.arg_index == 0
        assert validate_store(result.store) == []

    def test_paste_twice_gives_distinct_ids(self) -> None:
        store = build_store({"+": [{"var": "a"}, 1, 2]})
        clipboard = Clipboard()
        clipboard.copy(_child_id(store, 0), store)

        first = clipboard.paste(_child_id(store, 1), store)
        second = clipboard.paste(_child_id(first.store, 2), first.store)

        assert project_store(second.store) == {"+": [{"var": "a"}, {"var": "a"}, {"var": "a"}]}
        assert len(second.store.ids) == len(second.store)
        assert validate_store(second.store) == []

    def test_paste_without_target_replaces_tree(self) -> None:
        source = build_store({"and": [True, {"var": "x"}]})
        clipboard = Clipboard()
        clipboard.copy(_child_id(source, 1), source)

        result = clipboard.paste(None, build_store({"+": [1, 2]}))

        assert len(result.store) == 1
        assert result.store.root.parent_id is None  # type: ignore[union-attr]
        assert project_store(result.store) == {"var": "x"}

    def test_paste_on_root_replaces_tree(self) -> None:
        store = build_store({"+": [1, {"var": "x"}]})
        clipboard = Clipboard()
        clipboard.copy(_child_id(store, 1), store)

        result = clipboard.paste(store.root.id, store)  # type: ignore[union-attr]

        assert project_store(result.store) == {"var": "x"}

    def test_paste_with_empty_clipboard_is_noop(self) -> None:
        store = build_store({"+": [1, 2]})

        result = Clipboard().paste(store.root.id, store)  # type: ignore[union-attr]

        assert result.store is store
        assert not result.applied

    def test_clear(self) -> None:
        store = build_store({"+": [1, 2]})
        clipboard = Clipboard()
        clipboard.copy(store.root.id, store)  # type: ignore[union-attr]

        clipboard.clear()

        assert not clipboard.has_content
