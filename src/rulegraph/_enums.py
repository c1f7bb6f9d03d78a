"""String enums shared by the node model, the registry and the engine."""

from __future__ import annotations

from enum import StrEnum
from typing import Self


class StrEnumWithDoc(StrEnum):
    """Base class for string enums whose members carry a docstring.

    Members are declared as ``NAME = "value", "doc"``; the second element
    becomes the member's ``__doc__`` and is shown by the CLI.
    """

    def __new__(cls, value: str, doc: str = "") -> Self:
        """Create a new enum member with a docstring."""
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.__doc__ = doc
        return obj


class NodeKind(StrEnumWithDoc):
    """The kind of a node in the store."""

    LITERAL = "literal", "Atomic JSON value"
    VARIABLE = "variable", "Data accessor (var, val, exists)"
    OPERATOR = "operator", "Operator application with ordered cells"
    STRUCTURE = "structure", "Object or array template with embedded expressions"


class CellKind(StrEnumWithDoc):
    """What a cell (slot) of an operator or structure node holds."""

    INLINE = "inline", "JSON value embedded in the cell"
    EDITABLE = "editable", "Scalar field edited in place (e.g. a path segment)"
    BRANCH = "branch", "Reference to a child node"


class CellRole(StrEnumWithDoc):
    """Row role of a cell, used by decision and accessor operators."""

    IF = "if", "First condition of a decision"
    ELSE_IF = "else_if", "Subsequent condition of a decision"
    THEN = "then", "Value returned when the preceding condition holds"
    ELSE = "else", "Value returned when no condition holds"
    PATH = "path", "Path segment of an accessor"
    SCOPE = "scope", "Scope jump of a val accessor"
    DEFAULT = "default", "Fallback value of an accessor"

    @property
    def is_condition(self) -> bool:
        return self in (CellRole.IF, CellRole.ELSE_IF)

    @property
    def label(self) -> str:
        """Row label as displayed next to the cell."""
        return self.value.replace("_", " ").title()


class LiteralType(StrEnum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"

    @classmethod
    def of(cls, value: object) -> LiteralType:
        """Return the type tag of a JSON value."""
        # bool is checked before int: True is an int in Python
        if value is None:
            return cls.NULL
        if isinstance(value, bool):
            return cls.BOOLEAN
        if isinstance(value, int | float):
            return cls.NUMBER
        if isinstance(value, str):
            return cls.STRING
        if isinstance(value, list):
            return cls.ARRAY
        return cls.OBJECT


class ArityKind(StrEnumWithDoc):
    """Declared shape of an operator's operand count."""

    NULLARY = "nullary", "No operands (e.g. now)"
    UNARY = "unary", "One operand (e.g. !, abs)"
    BINARY = "binary", "Two operands (e.g. /, %)"
    TERNARY = "ternary", "Three operands (e.g. ?:, reduce)"
    NARY = "nary", "One or more operands (e.g. +, cat)"
    VARIADIC = "variadic", "Two or more operands (e.g. *, and)"
    CHAINABLE = "chainable", "Two or more operands compared pairwise (e.g. <)"
    RANGE = "range", "Bounded operand count (e.g. substr takes 2 to 3)"
    SPECIAL = "special", "Custom structure (e.g. if, val)"

    @property
    def is_extendable(self) -> bool:
        """Whether arguments can be appended to an operator of this kind."""
        return self in (
            ArityKind.NARY,
            ArityKind.VARIADIC,
            ArityKind.CHAINABLE,
            ArityKind.RANGE,
            ArityKind.SPECIAL,
        )
