"""Root test configuration for sass-core.

Registers the ``requirement`` marker and isolates every test from the
caller's ``SASS_PATH``, and from tracer and structlog state left behind by
other tests.

NOTE: Do NOT add __init__.py to test directories - pytest uses importlib mode
which can cause namespace collisions with __init__.py files.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
import structlog

from sass_core.telemetry.tracer_factory import reset_tracer


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear SASS_PATH, tracer state and logging configuration around each test."""
    monkeypatch.delenv("SASS_PATH", raising=False)
    reset_tracer()
    yield
    reset_tracer()
    structlog.reset_defaults()


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "requirement(id): Mark test as covering a specific requirement",
    )
