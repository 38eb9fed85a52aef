"""Stages of a single compilation run.

A run moves through the states below in order, ending in either DONE or
FAILED:

    1. START: Validate the request and bind the import cache
    2. RESOLVE_ENTRY: Resolve and parse the entry point
    3. EVALUATE: Evaluate the entry, resolving imports as they are encountered
    4. ASSEMBLE: Render CSS and package the result

Errors are tagged with the stage in which they occurred.
"""

from __future__ import annotations

from enum import Enum


class CompilationStage(str, Enum):
    """State of the compilation state machine.

    Example:
        >>> CompilationStage.RESOLVE_ENTRY.exit_code
        2
        >>> CompilationStage.START.exit_code
        1
    """

    START = "START"
    """Validate the request and bind the import cache."""

    RESOLVE_ENTRY = "RESOLVE_ENTRY"
    """Resolve the entry point through the cascade."""

    EVALUATE = "EVALUATE"
    """Evaluate the entry stylesheet and everything it imports."""

    ASSEMBLE = "ASSEMBLE"
    """Render the evaluated tree and package the result."""

    DONE = "DONE"
    """Terminal success."""

    FAILED = "FAILED"
    """Terminal failure."""

    @property
    def exit_code(self) -> int:
        """CLI exit code for errors raised in this stage.

        Returns:
            1 for configuration problems (START), 2 for everything else.
        """
        return 1 if self is CompilationStage.START else 2

    @property
    def description(self) -> str:
        """Human-readable description of this stage."""
        descriptions = {
            CompilationStage.START: "Validate the request and bind the import cache",
            CompilationStage.RESOLVE_ENTRY: "Resolve the entry point",
            CompilationStage.EVALUATE: "Evaluate stylesheets and resolve imports",
            CompilationStage.ASSEMBLE: "Render CSS and assemble the result",
            CompilationStage.DONE: "Compilation finished",
            CompilationStage.FAILED: "Compilation failed",
        }
        return descriptions[self]


__all__ = ["CompilationStage"]
