"""Node model of the editor.

Key types:
- Node: closed union of LiteralNode, VariableNode, OperatorNode, StructureNode
- Cell: one slot of an operator node or element of a structure node
- NodeStore: immutable ordered collection of nodes
"""

from ._nodes import (
    Cell,
    CompositeNode,
    LiteralNode,
    Node,
    NodeBase,
    OperatorNode,
    StructureNode,
    VariableNode,
    VariablePath,
    child_ids,
    new_node_id,
    reindex_cells,
)
from ._store import NodeStore

__all__ = [
    "Cell",
    "CompositeNode",
    "LiteralNode",
    "Node",
    "NodeBase",
    "NodeStore",
    "OperatorNode",
    "StructureNode",
    "VariableNode",
    "VariablePath",
    "child_ids",
    "new_node_id",
    "reindex_cells",
]
