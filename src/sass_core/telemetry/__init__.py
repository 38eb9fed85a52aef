"""Tracing and logging setup for the compiler."""

from __future__ import annotations

from sass_core.telemetry.logging import add_trace_context, configure_logging
from sass_core.telemetry.sanitization import sanitize_error_message
from sass_core.telemetry.tracing import create_span, get_tracer, reset_tracer, set_tracer

__all__ = [
    "add_trace_context",
    "configure_logging",
    "create_span",
    "get_tracer",
    "reset_tracer",
    "sanitize_error_message",
    "set_tracer",
]
