"""Execution traces from the evaluator, mapped onto store nodes.

The evaluator reports its own expression tree with integer ids, and a list
of execution steps referencing those ids. The evaluator's tree is finer than
the node tree: inline operands get trace nodes but no store node. Mapping
walks both trees together and attributes such operands to the nearest
visual ancestor.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, JsonValue

from ._projection import cached_expression, same_expression

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ._model import NodeStore

logger = logging.getLogger(__name__)


class ExpressionNode(BaseModel):
    """A node of the evaluator's expression tree.

    Attributes:
        id: Trace-local id.
        expression: The sub-expression as JSON text.
        children: Sub-expression nodes in operand order.

    """

    model_config = ConfigDict(frozen=True)

    id: int
    expression: str
    children: list[ExpressionNode] = Field(default_factory=list)

    def parsed(self) -> JsonValue:
        return json.loads(self.expression)

    def walk(self) -> Iterable[ExpressionNode]:
        yield self
        for child in self.children:
            yield from child.walk()


class ExecutionStep(BaseModel):
    """One evaluation step of a trace node."""

    model_config = ConfigDict(frozen=True)

    id: int
    node_id: int
    context: JsonValue = None
    result: JsonValue = None
    error: str | None = None
    iteration_index: int | None = None
    iteration_total: int | None = None


class TracedResult(BaseModel):
    """Full evaluator output: the result plus the trace that produced it."""

    result: JsonValue = None
    expression_tree: ExpressionNode
    steps: list[ExecutionStep] = Field(default_factory=list)
    error: str | None = None


def parse_trace(text: str | bytes) -> TracedResult:
    """Parse evaluator JSON output.

    Raises:
        pydantic.ValidationError: If the text is not a valid trace.

    """
    return TracedResult.model_validate_json(text)


def map_trace_to_store(trace_root: ExpressionNode, store: NodeStore, root_id: str) -> dict[int, str]:
    """Map every trace node id to the store node that displays it.

    A trace child is matched to the first unused child of the current store
    node whose expression equals the trace child's expression. Trace nodes
    without a counterpart map to the store node of their closest matched
    ancestor.

    Args:
        trace_root: Root of the evaluator's expression tree.
        store: The node store.
        root_id: Store node corresponding to `trace_root`.

    Returns:
        Mapping from trace id to store node id.

    """
    mapping: dict[int, str] = {}
    if root_id not in store:
        return mapping

    def visit(trace_node: ExpressionNode, node_id: str) -> None:
        mapping[trace_node.id] = node_id
        candidates = store.children(node_id)
        used: set[str] = set()
        for trace_child in trace_node.children:
            expression = trace_child.parsed()
            match = next(
                (
                    child
                    for child in candidates
                    if child.id not in used and same_expression(cached_expression(child), expression)
                ),
                None,
            )
            if match is None:
                for inlined in trace_child.walk():
                    mapping[inlined.id] = node_id
                continue
            used.add(match.id)
            visit(trace_child, match.id)

    visit(trace_root, root_id)
    logger.debug("Mapped %d trace nodes onto %d store nodes", len(mapping), len(set(mapping.values())))
    return mapping


def steps_for_node(steps: Iterable[ExecutionStep], mapping: Mapping[int, str], node_id: str) -> list[ExecutionStep]:
    """Steps whose trace node maps to `node_id`, in execution order."""
    return [step for step in steps if mapping.get(step.node_id) == node_id]
