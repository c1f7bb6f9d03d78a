"""Invariant checks over a whole store."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from ._edges import build_edge_graph
from ._model import OperatorNode, StructureNode
from ._projection import assemble, same_expression
from ._registry import get_operator

if TYPE_CHECKING:
    from ._model import NodeStore
    from ._registry import OperatorRegistry


def validate_store(store: NodeStore, registry: OperatorRegistry | None = None) -> list[str]:
    """Check the structural invariants of a store.

    Checks for:
    - Duplicate ids
    - Parent and branch references that do not resolve
    - Nodes referenced by more than one slot
    - Non-contiguous slot indices and mismatched back-references
    - Operand counts outside an operator's arity bounds
    - Stale cached expressions
    - Cycles

    Returns:
        List of error messages. Empty list if the store is valid.

    """
    errors: list[str] = []

    counts = Counter(node.id for node in store)
    errors.extend(f"Duplicate node id '{nid}'" for nid, n in counts.items() if n > 1)

    for node in store:
        if node.parent_id is not None and node.parent_id not in store:
            errors.append(f"Node '{node.id}' has unknown parent '{node.parent_id}'")
        if not isinstance(node, OperatorNode | StructureNode):
            continue

        for expected, cell in enumerate(node.cells):
            if cell.index != expected:
                errors.append(f"Node '{node.id}' has slot index {cell.index} at position {expected}")
            if not cell.is_branch or cell.branch_id is None:
                continue
            child = store.get(cell.branch_id)
            if child is None:
                errors.append(f"Node '{node.id}' slot {cell.index} references unknown node '{cell.branch_id}'")
            elif child.parent_id != node.id or child.arg_index != cell.index:
                errors.append(
                    f"Node '{child.id}' is in slot {cell.index} of '{node.id}' "
                    f"but records parent '{child.parent_id}' at index {child.arg_index}",
                )

        if isinstance(node, OperatorNode):
            spec = get_operator(node.operator, registry)
            if spec is not None and not spec.accepts(len(node.cells)):
                bounds = f"{spec.min}..{spec.max if spec.max is not None else 'inf'}"
                errors.append(f"Operator '{node.operator}' ({node.id}) has {len(node.cells)} operands, expected {bounds}")

        if not same_expression(assemble(node, store), node.expression):
            errors.append(f"Node '{node.id}' has a stale cached expression")

    graph = build_edge_graph(store)
    errors.extend(f"Node '{nid}' is referenced by {len(graph.parents(nid))} slots" for nid in graph.shared_nodes())

    for node in store:
        parent = store.get(node.parent_id)
        if isinstance(parent, OperatorNode | StructureNode) and node.id not in parent.branch_ids():
            errors.append(f"Node '{node.id}' is not referenced by its parent '{parent.id}'")

    if graph.has_cycle():
        errors.append("Store contains a reference cycle")

    return errors
