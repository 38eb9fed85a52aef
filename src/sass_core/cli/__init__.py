"""Command-line interface for sass-core."""

from __future__ import annotations

from sass_core.cli.main import cli

__all__ = ["cli"]
