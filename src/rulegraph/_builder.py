"""Parse a canonical expression into a node store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import JsonValue, TypeAdapter, ValidationError

from ._enums import CellKind, CellRole
from ._model import Cell, LiteralNode, NodeStore, OperatorNode, StructureNode, VariableNode, new_node_id
from ._projection import cached_expression, compose, with_expression
from ._registry import DECISION_OPERATORS, decision_roles, get_operator

if TYPE_CHECKING:
    from collections.abc import Callable

    from ._model import Node
    from ._registry import OperatorRegistry

logger = logging.getLogger(__name__)

_JSON_ADAPTER: TypeAdapter[JsonValue] = TypeAdapter(JsonValue)


class ExpressionError(ValueError):
    """Raised when a value cannot be represented as a node tree."""


def is_operation(value: object) -> bool:
    """Whether `value` is an operator application (a single-key object)."""
    return isinstance(value, dict) and len(value) == 1


def contains_operation(value: object) -> bool:
    """Whether `value` is, or nests, an operator application."""
    if is_operation(value):
        return True
    if isinstance(value, list):
        return any(contains_operation(item) for item in value)
    if isinstance(value, dict):
        return any(contains_operation(item) for item in value.values())
    return False


def _is_path(value: object) -> bool:
    return isinstance(value, str) or (isinstance(value, int) and not isinstance(value, bool))


class _StoreBuilder:
    def __init__(
        self,
        *,
        inline_literals: bool,
        registry: OperatorRegistry | None,
        new_id: Callable[[], str],
    ) -> None:
        self._inline_literals = inline_literals
        self._registry = registry
        self._new_id = new_id
        self._slots: list[Node | None] = []
        self._built: dict[str, Node] = {}

    def build(self, expression: JsonValue) -> NodeStore:
        self._convert(expression, None, None)
        nodes = tuple(node for node in self._slots if node is not None)
        return NodeStore(nodes)

    def _place(self, slot: int, node: Node) -> Node:
        self._slots[slot] = node
        self._built[node.id] = node
        return node

    def _reserve(self) -> int:
        # Parents are placed before their children in store order
        self._slots.append(None)
        return len(self._slots) - 1

    def _convert(self, value: JsonValue, parent_id: str | None, arg_index: int | None) -> Node:
        if isinstance(value, dict) and len(value) == 1:
            operator, operands = next(iter(value.items()))
            return self._operation(operator, operands, parent_id, arg_index)
        if isinstance(value, list | dict) and contains_operation(value):
            return self._structure(value, parent_id, arg_index)
        slot = self._reserve()
        return self._place(slot, LiteralNode.of(value, id=self._new_id(), parent_id=parent_id, arg_index=arg_index))

    def _operation(self, operator: str, operands: JsonValue, parent_id: str | None, arg_index: int | None) -> Node:
        if operator == "if" and (not isinstance(operands, list) or len(operands) <= 1):
            # A one-branch decision is just its operand; an empty one is null
            if isinstance(operands, list):
                only = operands[0] if operands else None
            else:
                only = operands
            return self._convert(only, parent_id, arg_index)

        accessor = self._accessor(operator, operands, parent_id, arg_index)
        if accessor is not None:
            return accessor

        slot = self._reserve()
        node_id = self._new_id()
        spec = get_operator(operator, self._registry)
        category = spec.category if spec is not None else ""

        bare = not isinstance(operands, list)
        args = [operands] if bare else list(operands)
        if operator in DECISION_OPERATORS:
            roles: list[CellRole | None] = list(decision_roles(len(args)))
        else:
            roles = [None] * len(args)
        cells = tuple(self._operand_cell(arg, node_id, i, role) for i, (arg, role) in enumerate(zip(args, roles, strict=True)))
        node = OperatorNode(
            id=node_id,
            parent_id=parent_id,
            arg_index=arg_index,
            operator=operator,
            category=category,
            cells=cells,
            bare_operand=bare,
        )
        return self._place(slot, self._with_cache(node))

    def _operand_cell(self, value: JsonValue, parent_id: str, index: int, role: CellRole | None) -> Cell:
        if self._inline_literals and not isinstance(value, list | dict):
            return Cell.inline(index, value, role=role)
        child = self._convert(value, parent_id, index)
        return Cell.branch(index, child.id, role=role)

    def _accessor(self, operator: str, operands: JsonValue, parent_id: str | None, arg_index: int | None) -> Node | None:
        """Build a variable node, or return None when the call does not fit one."""
        fields: dict[str, object] | None = None
        match operator:
            case "var":
                args = operands if isinstance(operands, list) else [operands]
                if len(args) <= 2 and (not args or _is_path(args[0])):  # noqa: PLR2004
                    path = args[0] if args else ""
                    if len(args) == 2 and contains_operation(args[1]):  # noqa: PLR2004
                        return self._var_with_expression_default(path, args[1], parent_id, arg_index)
                    fields = {"path": path}
                    if len(args) == 2:  # noqa: PLR2004
                        fields |= {"default": args[1], "has_default": True}
            case "exists":
                if _is_path(operands):
                    fields = {"path": operands}
                elif isinstance(operands, list) and all(_is_path(item) for item in operands):
                    fields = {"path": tuple(operands)}
            case "val":
                fields = self._val_fields(operands)
        if fields is None:
            return None
        slot = self._reserve()
        node = VariableNode(id=self._new_id(), parent_id=parent_id, arg_index=arg_index, operator=operator, **fields)  # type: ignore[arg-type]
        return self._place(slot, node)

    @staticmethod
    def _val_fields(operands: JsonValue) -> dict[str, object] | None:
        if _is_path(operands):
            return {"path": operands}
        if not isinstance(operands, list):
            return None
        items = list(operands)
        scope_jump = None
        if items and isinstance(items[0], list):
            head = items[0]
            if len(head) != 1 or not _is_path(head[0]) or isinstance(head[0], str):
                return None
            scope_jump = abs(head[0])
            items = items[1:]
        if not all(_is_path(item) for item in items):
            return None
        return {"path": tuple(items), "scope_jump": scope_jump}

    def _var_with_expression_default(
        self,
        path: str | int,
        default: JsonValue,
        parent_id: str | None,
        arg_index: int | None,
    ) -> Node:
        slot = self._reserve()
        node_id = self._new_id()
        spec = get_operator("var", self._registry)
        child = self._convert(default, node_id, 1)
        node = OperatorNode(
            id=node_id,
            parent_id=parent_id,
            arg_index=arg_index,
            operator="var",
            category=spec.category if spec is not None else "",
            cells=(
                Cell(kind=CellKind.EDITABLE, index=0, value=path, role=CellRole.PATH, field_id="path"),
                Cell.branch(1, child.id, role=CellRole.DEFAULT),
            ),
        )
        return self._place(slot, self._with_cache(node))

    def _structure(self, value: list[JsonValue] | dict[str, JsonValue], parent_id: str | None, arg_index: int | None) -> Node:
        slot = self._reserve()
        node_id = self._new_id()
        items = list(value.items()) if isinstance(value, dict) else [(None, item) for item in value]
        cells = []
        for i, (key, item) in enumerate(items):
            if contains_operation(item):
                child = self._convert(item, node_id, i)
                cells.append(Cell.branch(i, child.id, key=key))
            else:
                cells.append(Cell.inline(i, item, key=key))
        node = StructureNode(
            id=node_id,
            parent_id=parent_id,
            arg_index=arg_index,
            is_array=isinstance(value, list),
            cells=tuple(cells),
        )
        return self._place(slot, self._with_cache(node))

    def _with_cache(self, node: OperatorNode | StructureNode) -> Node:
        expression = compose(node, lambda child_id: cached_expression(self._built[child_id]))
        return with_expression(node, expression)


def build_store(
    expression: object,
    *,
    inline_literals: bool = False,
    registry: OperatorRegistry | None = None,
    new_id: Callable[[], str] = new_node_id,
) -> NodeStore:
    """Convert a canonical expression into a node store.

    Args:
        expression: A JSON value. Single-key objects are operator
            applications; unknown operator names are accepted.
        inline_literals: Embed primitive operands as inline cells instead of
            creating a literal child node for each.
        registry: Operator registry used for categories. Defaults to the
            built-in registry.
        new_id: Identifier factory.

    Returns:
        A store whose primary root projects back to the canonical form of
        `expression`.

    Raises:
        ExpressionError: If `expression` is not a JSON value.

    Example:
        >>> store = build_store({"+": [2, 3]})
        >>> [node.kind for node in store]
        [<NodeKind.OPERATOR: 'operator'>, <NodeKind.LITERAL: 'literal'>, <NodeKind.LITERAL: 'literal'>]

    """
    try:
        value = _JSON_ADAPTER.validate_python(expression, strict=True)
    except ValidationError as e:
        msg = f"Not a JSON expression: {e.errors()[0]['msg']}"
        raise ExpressionError(msg) from e
    store = _StoreBuilder(inline_literals=inline_literals, registry=registry, new_id=new_id).build(value)
    logger.debug("Built store with %d nodes", len(store))
    return store
