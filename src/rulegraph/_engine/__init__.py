"""Mutation engine: structural edits that keep the store consistent.

Every operation is a pure function ``(store, ...) -> MutationResult``. A
rejected operation returns the very same store object and no node id.

Key types:
- MutationResult: new store plus the node of interest
- NewNodeKind: kind of node an operation should create
"""

from ._arguments import add_argument, remove_argument
from ._common import NewNodeKind
from ._create import create_node
from ._delete import delete_node_and_descendants
from ._edit import UNSET, set_cell_value, update_literal, update_variable
from ._result import MutationResult
from ._transform import (
    LITERAL_PLACEHOLDER,
    VARIABLE_PLACEHOLDER,
    duplicate_node_tree,
    insert_node_on_edge,
    wrap_in_operator,
)

__all__ = [
    "LITERAL_PLACEHOLDER",
    "UNSET",
    "VARIABLE_PLACEHOLDER",
    "MutationResult",
    "NewNodeKind",
    "add_argument",
    "create_node",
    "delete_node_and_descendants",
    "duplicate_node_tree",
    "insert_node_on_edge",
    "remove_argument",
    "set_cell_value",
    "update_literal",
    "update_variable",
    "wrap_in_operator",
]
