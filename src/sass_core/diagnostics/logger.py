"""Diagnostic loggers.

Warnings and debug messages produced while compiling a stylesheet (including
deprecation notices) are user-facing output, separate from the library's own
structlog events. They are delivered to a ``Logger``:

- ``StderrLogger`` renders them to standard error through a structlog
  console renderer, optionally with colors.
- ``SilentLogger`` discards everything.

Callers can pass any object implementing the ``Logger`` protocol.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Any, Protocol, runtime_checkable

import structlog

from sass_core.compilation.errors import SourceSpan


@runtime_checkable
class Logger(Protocol):
    """Receiver for compilation diagnostics."""

    def warn(
        self,
        message: str,
        *,
        span: SourceSpan | None = None,
        deprecation: bool = False,
    ) -> None:
        """Emit a warning.

        Args:
            message: Warning text.
            span: Location the warning refers to.
            deprecation: Whether this is a deprecation notice.
        """
        ...

    def debug(self, message: str, span: SourceSpan | None = None) -> None:
        """Emit a debug message (from ``@debug``)."""
        ...


class StderrLogger:
    """Logger writing diagnostics to standard error.

    Example:
        >>> logger = StderrLogger(color=True)
        >>> logger.warn("Unknown property", span=SourceSpan(url="file:///a.scss", line=2))
    """

    def __init__(self, *, color: bool = False, stream: IO[str] | None = None) -> None:
        """Initialize StderrLogger.

        Args:
            color: Whether to use terminal colors.
            stream: Output stream; defaults to ``sys.stderr``.
        """
        self.color = color
        self._log = structlog.wrap_logger(
            structlog.PrintLogger(file=stream if stream is not None else sys.stderr),
            processors=[
                structlog.processors.add_log_level,
                structlog.dev.ConsoleRenderer(colors=color),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        )

    def warn(
        self,
        message: str,
        *,
        span: SourceSpan | None = None,
        deprecation: bool = False,
    ) -> None:
        """Write a warning, tagging deprecations."""
        fields: dict[str, Any] = {}
        if deprecation:
            fields["deprecation"] = True
        if span is not None:
            fields["location"] = span.format()
        self._log.warning(message, **fields)

    def debug(self, message: str, span: SourceSpan | None = None) -> None:
        """Write a debug message."""
        if span is not None:
            self._log.debug(message, location=span.format())
        else:
            self._log.debug(message)

    def __repr__(self) -> str:
        return f"StderrLogger(color={self.color})"


class SilentLogger:
    """Logger that discards every diagnostic."""

    def warn(
        self,
        message: str,
        *,
        span: SourceSpan | None = None,
        deprecation: bool = False,
    ) -> None:
        pass

    def debug(self, message: str, span: SourceSpan | None = None) -> None:
        pass


__all__ = ["Logger", "SilentLogger", "StderrLogger"]
