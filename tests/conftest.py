"""Shared test fixtures."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

_FAKE_COMMAND = f"{sys.executable} -m testrunner.runner.fake_command"


@pytest.fixture()
def fake_command() -> str:
    """Command string running the bundled stand-in test command."""
    return _FAKE_COMMAND


@pytest.fixture()
def make_tree(tmp_path: Path) -> Callable[..., Path]:
    """Create files (relative paths) under a fresh root directory."""

    def _make(*relative_paths: str) -> Path:
        root = tmp_path / "suite"
        root.mkdir(exist_ok=True)
        for relative in relative_paths:
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text("<?php\n", "utf-8")
        return root

    return _make
