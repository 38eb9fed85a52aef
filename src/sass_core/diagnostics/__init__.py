"""User-facing compilation diagnostics: loggers and the deprecation throttle."""

from __future__ import annotations

from sass_core.diagnostics.logger import Logger, SilentLogger, StderrLogger
from sass_core.diagnostics.throttle import DEFAULT_THRESHOLD, DeprecationThrottle

__all__ = [
    "DEFAULT_THRESHOLD",
    "DeprecationThrottle",
    "Logger",
    "SilentLogger",
    "StderrLogger",
]
