"""The bundled example rules parse, project back unchanged and validate."""

import json
from pathlib import Path

import pytest

from rulegraph import build_store, project_store, validate_store

RULES_DIR = Path(__file__).parent.parent / "examples" / "rules"


@pytest.mark.parametrize("rule_file", sorted(RULES_DIR.glob("*.json")), ids=lambda p: p.stem)
def test_example_rule(rule_file: Path) -> None:
    expression = json.loads(rule_file.read_text())

    store = build_store(expression)

    assert project_store(store) == expression
    assert validate_store(store) == []
