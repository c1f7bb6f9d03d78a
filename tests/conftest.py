"""Shared fixtures."""

import itertools
from collections.abc import Callable

import pytest


@pytest.fixture
def new_id() -> Callable[[], str]:
    """Deterministic identifier factory: n0, n1, n2, ..."""
    counter = itertools.count()
    return lambda: f"n{next(counter)}"
