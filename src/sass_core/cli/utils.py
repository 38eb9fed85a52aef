"""CLI output helpers and exit codes.

Errors and progress go to stderr; stdout carries only CSS, so the output
of ``sass-core compile`` can be redirected to a file.

Example:
    from sass_core.cli.utils import ExitCode, error_exit

    try:
        path.write_text(css)
    except PermissionError:
        error_exit("Cannot write output", exit_code=ExitCode.PERMISSION_ERROR, path=str(path))
"""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from typing import NoReturn


class ExitCode(IntEnum):
    """Exit codes of the CLI.

    Compilation failures use the exit code of their stage: configuration
    problems exit with 1, every other compilation error with 2.
    """

    SUCCESS = 0
    """CSS written."""

    CONFIGURATION_ERROR = 1
    """Unusable options, package config or toolchain."""

    COMPILATION_ERROR = 2
    """Import, syntax or evaluation failure, and click usage errors."""

    PERMISSION_ERROR = 3
    """The CSS or source map file could not be written."""


def error(message: str, **context: str | int | bool | None) -> None:
    """Print an error message to stderr.

    Example:
        error("File not found", path="/path/to/file")
        # Output: Error: File not found (path=/path/to/file)
    """
    context_str = ", ".join(f"{k}={v}" for k, v in context.items() if v is not None)
    text = f"Error: {message} ({context_str})" if context_str else f"Error: {message}"
    click.echo(text, err=True)


def error_exit(
    message: str,
    exit_code: ExitCode = ExitCode.COMPILATION_ERROR,
    **context: str | int | bool | None,
) -> NoReturn:
    """Print an error message to stderr and exit with ``exit_code``.

    Raises:
        SystemExit: Always.
    """
    error(message, **context)
    sys.exit(exit_code)


def warn(message: str) -> None:
    """Print a warning message to stderr."""
    click.echo(f"Warning: {message}", err=True)


def info(message: str) -> None:
    """Print a progress message to stderr."""
    click.echo(message, err=True)


__all__ = ["ExitCode", "error", "error_exit", "info", "warn"]
