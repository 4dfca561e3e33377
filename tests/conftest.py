"""Shared fixtures for git-walk tests."""

import sys
from pathlib import Path
from typing import Iterable

import pytest


@pytest.fixture
def make_tree(tmp_path):
    """Create directories (relative to tmp_path) and return the root."""
    def _make(paths: Iterable[str]) -> Path:
        for rel in paths:
            (tmp_path / rel).mkdir(parents=True, exist_ok=True)
        return tmp_path
    return _make


@pytest.fixture
def python_command():
    """Build an argv that runs a short Python snippet with this interpreter."""
    def _command(code: str) -> list:
        return [sys.executable, "-c", code]
    return _command
