"""Node-graph editor engine for JSON rule expressions."""

__all__ = [
    "Cell",
    "CellKind",
    "CellRole",
    "Clipboard",
    "CloneResult",
    "Edge",
    "EdgeGraph",
    "EditorSession",
    "ExecutionStep",
    "ExpressionError",
    "ExpressionNode",
    "History",
    "LiteralNode",
    "LiteralType",
    "MutationResult",
    "NewNodeKind",
    "Node",
    "NodeKind",
    "NodeStore",
    "OperatorNode",
    "OperatorRegistry",
    "OperatorSpec",
    "Selection",
    "StructureNode",
    "TracedResult",
    "VariableNode",
    "add_argument",
    "build_edge_graph",
    "build_edges",
    "build_store",
    "clone_subtree",
    "create_node",
    "default_registry",
    "delete_node_and_descendants",
    "descendant_ids",
    "dump_store",
    "duplicate_node_tree",
    "insert_node_on_edge",
    "load_store",
    "map_trace_to_store",
    "parse_trace",
    "project",
    "project_store",
    "refresh",
    "remove_argument",
    "set_cell_value",
    "steps_for_node",
    "update_literal",
    "update_variable",
    "validate_store",
    "wrap_in_operator",
]

from ._builder import ExpressionError, build_store
from ._clipboard import Clipboard
from ._clone import CloneResult, clone_subtree
from ._edges import Edge, build_edge_graph, build_edges
from ._engine import (
    MutationResult,
    NewNodeKind,
    add_argument,
    create_node,
    delete_node_and_descendants,
    duplicate_node_tree,
    insert_node_on_edge,
    remove_argument,
    set_cell_value,
    update_literal,
    update_variable,
    wrap_in_operator,
)
from ._enums import CellKind, CellRole, LiteralType, NodeKind
from ._graph import EdgeGraph
from ._history import History
from ._model import Cell, LiteralNode, Node, NodeStore, OperatorNode, StructureNode, VariableNode
from ._projection import project, project_store, refresh
from ._registry import OperatorRegistry, OperatorSpec, default_registry
from ._selection import Selection
from ._session import EditorSession
from ._snapshot import dump_store, load_store
from ._trace import ExecutionStep, ExpressionNode, TracedResult, map_trace_to_store, parse_trace, steps_for_node
from ._traversal import descendant_ids
from ._validate import validate_store
