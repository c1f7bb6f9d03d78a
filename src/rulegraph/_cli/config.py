"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from rulegraph._history import DEFAULT_HISTORY_LIMIT
from rulegraph._registry import OperatorRegistry, default_registry


class ConfigError(Exception):
    """Error in rulegraph configuration."""


@dataclass(slots=True, frozen=True)
class RulegraphConfig:
    """Configuration loaded from the ``[tool.rulegraph]`` table.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    history_limit: int = DEFAULT_HISTORY_LIMIT
    inline_literals: bool = False
    operators: Path | None = None
    project_root: Path | None = None

    def registry(self) -> OperatorRegistry:
        """Built-in registry, overlaid with the configured operator table.

        Raises:
            ConfigError: If the operator table cannot be read.

        """
        base = default_registry()
        if self.operators is None:
            return base
        try:
            extra = OperatorRegistry.from_toml(self.operators)
        except OSError as e:
            msg = f"Cannot read operator table {self.operators}: {e}"
            raise ConfigError(msg) from e
        except (tomllib.TOMLDecodeError, ValidationError) as e:
            msg = f"Invalid operator table {self.operators}: {e}"
            raise ConfigError(msg) from e
        return base.merged(extra)


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    current = (start_dir if start_dir is not None else Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def _parse_history_limit(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        msg = f"Invalid [tool.rulegraph].history-limit: expected a positive integer, got {value!r}"
        raise ConfigError(msg)
    return value


def load_config(pyproject_path: Path) -> RulegraphConfig:
    """Load and validate [tool.rulegraph] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed RulegraphConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("rulegraph", {})
    if not section:
        return RulegraphConfig(project_root=project_root)

    unknown = set(section) - {"history-limit", "inline-literals", "operators"}
    if unknown:
        msg = f"Unknown [tool.rulegraph] keys: {', '.join(sorted(unknown))}"
        raise ConfigError(msg)

    history_limit = _parse_history_limit(section.get("history-limit", DEFAULT_HISTORY_LIMIT))

    inline_literals = section.get("inline-literals", False)
    if not isinstance(inline_literals, bool):
        msg = "Invalid [tool.rulegraph].inline-literals: expected boolean"
        raise ConfigError(msg)

    operators: Path | None = None
    if "operators" in section:
        value = section["operators"]
        if not isinstance(value, str):
            msg = "Invalid [tool.rulegraph].operators: expected string path"
            raise ConfigError(msg)
        operators = Path(value)
        if not operators.is_absolute():
            operators = project_root / operators

    return RulegraphConfig(
        history_limit=history_limit,
        inline_literals=inline_literals,
        operators=operators,
        project_root=project_root,
    )


def get_config() -> RulegraphConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        RulegraphConfig (defaults if no pyproject.toml or no [tool.rulegraph] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return RulegraphConfig()
    return load_config(pyproject_path)
