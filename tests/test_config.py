"""Tests for the configuration module."""

from pathlib import Path

import pytest

from rulegraph._cli.config import (
    ConfigError,
    RulegraphConfig,
    find_pyproject_toml,
    get_config,
    load_config,
)
from rulegraph._history import DEFAULT_HISTORY_LIMIT


class TestFindPyprojectToml:
    """Tests for find_pyproject_toml function."""

    def test_finds_in_current_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in current directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        result = find_pyproject_toml(tmp_path)

        assert result == pyproject

    def test_finds_in_parent_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in parent directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        subdir = tmp_path / "rules" / "billing"
        subdir.mkdir(parents=True)

        result = find_pyproject_toml(subdir)

        assert result == pyproject


class TestLoadConfig:
    """Tests for loading the [tool.rulegraph] table."""

    def test_defaults_without_section(self, tmp_path: Path) -> None:
        """Should return defaults when [tool.rulegraph] is absent."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        config = load_config(pyproject)

        assert config.history_limit == DEFAULT_HISTORY_LIMIT
        assert not config.inline_literals
        assert config.operators is None
        assert config.project_root == tmp_path

    def test_all_keys(self, tmp_path: Path) -> None:
        """Should parse every supported key."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.rulegraph]
history-limit = 10
inline-literals = true
operators = "rules/operators.toml"
""",
        )

        config = load_config(pyproject)

        assert config.history_limit == 10
        assert config.inline_literals
        assert config.operators == tmp_path / "rules" / "operators.toml"

    def test_absolute_operator_path_is_kept(self, tmp_path: Path) -> None:
        """Should not re-root an absolute operators path."""
        table = tmp_path / "elsewhere" / "ops.toml"
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(f"[tool.rulegraph]\noperators = '{table.as_posix()}'\n")

        config = load_config(pyproject)

        assert config.operators == table

    @pytest.mark.parametrize(
        ("body", "message"),
        [
            ("history-limit = 0", "history-limit: expected a positive integer"),
            ("history-limit = true", "history-limit: expected a positive integer"),
            ("history-limit = '5'", "history-limit: expected a positive integer"),
            ("inline-literals = 'yes'", "inline-literals: expected boolean"),
            ("operators = 3", "operators: expected string path"),
            ("colour = 'red'", "Unknown \\[tool.rulegraph\\] keys: colour"),
        ],
    )
    def test_invalid_values(self, tmp_path: Path, body: str, message: str) -> None:
        """Should raise ConfigError naming the offending key."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(f"[tool.rulegraph]\n{body}\n")

        with pytest.raises(ConfigError, match=message):
            load_config(pyproject)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Should wrap TOML syntax errors."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.rulegraph\n")

        with pytest.raises(ConfigError, match="Invalid TOML in"):
            load_config(pyproject)


class TestConfigRegistry:
    """Tests for RulegraphConfig.registry."""

    def test_builtin_without_table(self) -> None:
        registry = RulegraphConfig().registry()

        assert "+" in registry

    def test_table_is_merged(self, tmp_path: Path) -> None:
        table = tmp_path / "ops.toml"
        table.write_text('[operators.clamp]\ncategory = "arithmetic"\narity = "ternary"\nmin = 3\nmax = 3\n')

        registry = RulegraphConfig(operators=table).registry()

        assert "clamp" in registry
        assert "if" in registry

    def test_missing_table(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read operator table"):
            RulegraphConfig(operators=tmp_path / "missing.toml").registry()

    def test_invalid_table(self, tmp_path: Path) -> None:
        table = tmp_path / "ops.toml"
        table.write_text('[operators.clamp]\narity = "often"\n')

        with pytest.raises(ConfigError, match="Invalid operator table"):
            RulegraphConfig(operators=table).registry()


def test_get_config_from_working_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.rulegraph]\nhistory-limit = 3\n")
    monkeypatch.chdir(tmp_path)

    assert get_config().history_limit == 3
