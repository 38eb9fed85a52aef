"""Fixtures for CLI tests."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from sass_core.toolchain import Toolchain


@pytest.fixture
def cli_runner() -> CliRunner:
    """Click runner with separate stdout and stderr."""
    return CliRunner()


@pytest.fixture
def installed_toolchain(monkeypatch: pytest.MonkeyPatch, toolchain: Toolchain) -> list[str | None]:
    """Make the fake toolchain the discovered one; returns the requested names."""
    requested: list[str | None] = []

    def discover(name: str | None = None) -> Toolchain:
        requested.append(name)
        return toolchain

    monkeypatch.setattr("sass_core.cli.compile.discover_toolchain", discover)
    return requested
