"""In-place value edits."""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import TYPE_CHECKING, Final

from rulegraph._builder import contains_operation
from rulegraph._enums import CellKind, LiteralType
from rulegraph._model import LiteralNode, OperatorNode, StructureNode, VariableNode
from rulegraph._projection import same_expression

from ._common import commit
from ._result import MutationResult

if TYPE_CHECKING:
    from pydantic import JsonValue

    from rulegraph._model import NodeStore, VariablePath

logger = logging.getLogger(__name__)


class _Unset(Enum):
    UNSET = "UNSET"


UNSET: Final = _Unset.UNSET


def update_literal(store: NodeStore, node_id: str, value: JsonValue) -> MutationResult:
    """Replace a literal's value and re-tag its type.

    Values containing an operator application are rejected: they belong in
    an operator node, not a literal.
    """
    node = store.get(node_id)
    if not isinstance(node, LiteralNode):
        return MutationResult.rejected(store, "%s is not a literal", node_id)
    if contains_operation(value):
        return MutationResult.rejected(store, "literal value %r contains an operation", value)
    if same_expression(node.value, value):
        return MutationResult.rejected(store, "literal %s already holds %r", node_id, value)
    updated = replace(node, value=value, value_type=LiteralType.of(value))
    return MutationResult(commit(store, [updated], refresh_from=node.parent_id), node_id)


def update_variable(
    store: NodeStore,
    node_id: str,
    *,
    path: VariablePath | _Unset = UNSET,
    default: JsonValue | _Unset = UNSET,
    scope_jump: int | None | _Unset = UNSET,
    clear_default: bool = False,
) -> MutationResult:
    """Edit the path, default or scope jump of an accessor.

    Args:
        store: The current store.
        node_id: Id of the variable node.
        path: New path; a list is stored as a segment tuple.
        default: New default (``var`` only). ``None`` sets a JSON null
            default; use `clear_default` to remove it.
        scope_jump: New scope jump (``val`` only); None removes it.
        clear_default: Remove the default.

    """
    node = store.get(node_id)
    if not isinstance(node, VariableNode):
        return MutationResult.rejected(store, "%s is not a variable", node_id)
    changes: dict[str, object] = {}
    if path is not UNSET:
        changes["path"] = tuple(path) if isinstance(path, list) else path
    if clear_default:
        changes |= {"default": None, "has_default": False}
    elif default is not UNSET:
        if node.operator != "var":
            return MutationResult.rejected(store, "only var accessors take a default")
        changes |= {"default": default, "has_default": True}
    if scope_jump is not UNSET:
        if node.operator != "val":
            return MutationResult.rejected(store, "only val accessors take a scope jump")
        changes["scope_jump"] = abs(scope_jump) if scope_jump is not None else None
    updated = replace(node, **changes)  # type: ignore[arg-type]
    if updated == node:
        return MutationResult.rejected(store, "variable %s is unchanged", node_id)
    return MutationResult(commit(store, [updated], refresh_from=node.parent_id), node_id)


def set_cell_value(store: NodeStore, node_id: str, index: int, value: JsonValue) -> MutationResult:
    """Set the value of an inline or editable cell."""
    node = store.get(node_id)
    if not isinstance(node, OperatorNode | StructureNode):
        return MutationResult.rejected(store, "%s has no cells", node_id)
    cell = node.cell_at(index)
    if cell is None or cell.kind is CellKind.BRANCH:
        return MutationResult.rejected(store, "cell %d of %s does not hold a value", index, node_id)
    if contains_operation(value):
        return MutationResult.rejected(store, "cell value %r contains an operation", value)
    cells = (*node.cells[:index], replace(cell, value=value), *node.cells[index + 1 :])
    updated = replace(node, cells=cells)
    return MutationResult(commit(store, [updated], refresh_from=node_id), node_id)
