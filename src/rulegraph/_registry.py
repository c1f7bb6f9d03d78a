"""Operator registry: arity and category metadata per operator name."""

from __future__ import annotations

import logging
import tomllib
from importlib import resources
from typing import TYPE_CHECKING, Self

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from ._enums import ArityKind, CellRole

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from pathlib import Path

    from pydantic import JsonValue

logger = logging.getLogger(__name__)

DECISION_OPERATORS = frozenset({"if", "?:"})
VARIABLE_OPERATORS = frozenset({"var", "val", "exists"})

_CATEGORY_DEFAULTS: dict[str, JsonValue] = {
    "arithmetic": 0,
    "comparison": 0,
    "array": 0,
    "logical": True,
    "string": "text",
}


def default_value(category: str) -> JsonValue:
    """Default literal for a new operand of an operator in `category`."""
    return _CATEGORY_DEFAULTS.get(category, 0)


def decision_roles(count: int) -> list[CellRole]:
    """Row roles of a decision operator with `count` operands.

    Operands pair up as condition/then; an odd trailing operand is the
    else branch.

    Example:
        >>> [str(r) for r in decision_roles(5)]
        ['if', 'then', 'else_if', 'then', 'else']

    """
    roles: list[CellRole] = []
    for i in range(count):
        if i == count - 1 and count % 2 == 1:
            roles.append(CellRole.ELSE)
        elif i % 2 == 0:
            roles.append(CellRole.IF if i == 0 else CellRole.ELSE_IF)
        else:
            roles.append(CellRole.THEN)
    return roles


class OperatorSpec(BaseModel):
    """Static description of one operator.

    Attributes:
        name: Operator name as it appears in the expression key.
        label: Human-readable title.
        category: Category name (arithmetic, logical, comparison, ...).
        arity: Declared arity kind.
        min: Minimum number of operands.
        max: Maximum number of operands, or None when unbounded.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    label: str = ""
    category: str
    arity: ArityKind
    min: int = Field(default=0, ge=0)
    max: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> Self:
        if self.max is not None and self.max < self.min:
            msg = f"Operator '{self.name}': max ({self.max}) is smaller than min ({self.min})"
            raise ValueError(msg)
        return self

    @property
    def is_extendable(self) -> bool:
        """Whether arguments may be appended to this operator."""
        return self.arity.is_extendable

    def accepts(self, count: int) -> bool:
        """Check whether `count` operands satisfy the arity bounds."""
        return count >= self.min and (self.max is None or count <= self.max)


class _OperatorEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    label: str = ""
    category: str
    arity: ArityKind
    min: int = 0
    max: int | None = None


_TABLE_ADAPTER = TypeAdapter(dict[str, _OperatorEntry])


class OperatorRegistry:
    """Read-only lookup table from operator name to `OperatorSpec`."""

    def __init__(self, specs: Mapping[str, OperatorSpec] | None = None) -> None:
        self._specs: dict[str, OperatorSpec] = dict(specs or {})

    @classmethod
    def from_table(cls, table: Mapping[str, object]) -> Self:
        """Build a registry from a mapping shaped like the ``[operators]`` TOML table.

        Raises:
            pydantic.ValidationError: If an entry is malformed.

        """
        entries = _TABLE_ADAPTER.validate_python(table)
        specs = {
            name: OperatorSpec(name=name, **entry.model_dump())
            for name, entry in entries.items()
        }
        return cls(specs)

    @classmethod
    def from_toml(cls, path: Path) -> Self:
        with path.open("rb") as f:
            data = tomllib.load(f)
        return cls.from_table(data.get("operators", {}))

    @classmethod
    def builtin(cls) -> Self:
        """Registry of every operator the editor knows out of the box."""
        text = resources.files(__package__).joinpath("operators.toml").read_text(encoding="utf-8")
        return cls.from_table(tomllib.loads(text).get("operators", {}))

    def merged(self, other: OperatorRegistry) -> OperatorRegistry:
        """Return a new registry where entries of `other` override this one."""
        return OperatorRegistry({**self._specs, **other._specs})

    def get(self, name: str) -> OperatorSpec | None:
        return self._specs.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __iter__(self) -> Iterator[OperatorSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)


_default_registry: OperatorRegistry | None = None


def default_registry() -> OperatorRegistry:
    """Return the lazily loaded built-in registry."""
    global _default_registry  # noqa: PLW0603
    if _default_registry is None:
        _default_registry = OperatorRegistry.builtin()
        logger.debug("Loaded %d built-in operators", len(_default_registry))
    return _default_registry


def get_operator(name: str, registry: OperatorRegistry | None = None) -> OperatorSpec | None:
    """Look up an operator, falling back to the built-in registry."""
    if registry is None:
        registry = default_registry()
    return registry.get(name)
