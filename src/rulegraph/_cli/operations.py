"""Edit operations given on the command line.

Node ids are random, so the command line addresses nodes by slot path: a
dot-separated list of slot indices walked from the primary root. The empty
path is the root itself, ``0`` its first operand, ``0.2`` the third operand
of that operand.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rulegraph._model import OperatorNode, StructureNode

if TYPE_CHECKING:
    from rulegraph._model import NodeStore
    from rulegraph._session import EditorSession

logger = logging.getLogger(__name__)

ACTIONS = ("add", "remove", "wrap", "duplicate", "delete", "undo", "redo")

# Arguments after the node path; the last one keeps any further colons
MAX_ARGS = {"add": 2, "remove": 1, "wrap": 1}


class OperationError(ValueError):
    """An edit operation cannot be parsed or its target does not exist."""


@dataclass(frozen=True, slots=True)
class EditOperation:
    """A parsed ``--op`` argument."""

    action: str
    path: str = ""
    args: tuple[str, ...] = ()

    def __str__(self) -> str:
        return ":".join((self.action, self.path, *self.args)) if self.action not in ("undo", "redo") else self.action


def parse_operation(text: str) -> EditOperation:
    """Parse ``action[:path[:arg...]]``.

    Operator names may contain colons (``wrap::?:``), so the final argument
    takes the rest of the text.

    Raises:
        OperationError: On an unknown action or missing arguments.

    """
    action, sep, remainder = text.partition(":")
    if action not in ACTIONS:
        msg = f"Unknown action '{action}' (expected one of: {', '.join(ACTIONS)})"
        raise OperationError(msg)
    if action in ("undo", "redo"):
        if sep:
            msg = f"'{action}' takes no arguments"
            raise OperationError(msg)
        return EditOperation(action)
    if not sep:
        msg = f"'{action}' needs a node path (use '{action}:' for the root)"
        raise OperationError(msg)
    path, *args = remainder.split(":", MAX_ARGS.get(action, 0))
    required = {"remove": 1, "wrap": 1}.get(action, 0)
    if len(args) < required:
        msg = f"'{action}' needs {required} argument(s) after the node path"
        raise OperationError(msg)
    return EditOperation(action, path, tuple(args))


def resolve_node_path(store: NodeStore, path: str) -> str:
    """Return the id of the node at slot path `path`.

    Raises:
        OperationError: If the path does not lead to a node.

    """
    node = store.root
    if node is None:
        msg = "The expression is empty"
        raise OperationError(msg)
    for part in filter(None, path.split(".")):
        try:
            index = int(part)
        except ValueError:
            msg = f"Invalid slot index '{part}' in path '{path}'"
            raise OperationError(msg) from None
        cell = node.cell_at(index) if isinstance(node, OperatorNode | StructureNode) else None
        child = store.get(cell.branch_id) if cell is not None else None
        if child is None:
            msg = f"No node at path '{path}' (slot {index} is empty or missing)"
            raise OperationError(msg)
        node = child
    return node.id


def _parse_index(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        msg = f"Invalid operand index '{text}'"
        raise OperationError(msg) from None


def apply_operation(session: EditorSession, operation: EditOperation) -> bool:
    """Run one operation against the session; returns whether it changed anything.

    Raises:
        OperationError: If the node path does not resolve or an index is not
            a number.

    """
    match operation.action:
        case "undo":
            return session.undo()
        case "redo":
            return session.redo()
        case _:
            pass

    node_id = resolve_node_path(session.store, operation.path)
    match operation.action, operation.args:
        case "add", ():
            result = session.add_argument(node_id)
        case "add", (kind,):
            result = session.add_argument(node_id, kind)
        case "add", (kind, operator, *_):
            result = session.add_argument(node_id, kind, operator)
        case "remove", (index, *_):
            result = session.remove_argument(node_id, _parse_index(index))
        case "wrap", (operator, *_):
            result = session.wrap_in_operator(node_id, operator)
        case "duplicate", _:
            result = session.duplicate_node(node_id)
        case "delete", _:
            result = session.delete_node(node_id)
        case _:
            msg = f"Cannot apply '{operation}'"
            raise OperationError(msg)
    logger.debug("%s -> %s", operation, "applied" if result.applied else "no-op")
    return result.applied
