"""OpenTelemetry spans for compilation stages.

Every stage of a compilation runs inside ``create_span``. Spans come from
the ``sass_core`` tracer; failures mark the span as errored with a
sanitized message, since importer errors can echo URLs with credentials.

Example:
    >>> with create_span("compile.evaluate", attributes={"sass.url": url}) as span:
    ...     span.set_attribute("sass.imports", 3)
"""

from __future__ import annotations

from collections.abc import Generator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from opentelemetry.trace import Status, StatusCode, Tracer

from sass_core.telemetry import tracer_factory
from sass_core.telemetry.sanitization import sanitize_error_message

if TYPE_CHECKING:
    from opentelemetry.trace import Span

TRACER_NAME = "sass_core"

reset_tracer = tracer_factory.reset_tracer


def get_tracer() -> Tracer:
    """Tracer used for compilation spans."""
    return tracer_factory.get_tracer(TRACER_NAME)


def set_tracer(tracer: Tracer | None) -> None:
    """Replace the compilation tracer (for testing); None resets it."""
    tracer_factory.set_tracer(TRACER_NAME, tracer)


def _mark_failed(span: Span, error: Exception) -> None:
    message = sanitize_error_message(str(error))
    span.set_status(Status(StatusCode.ERROR, message))
    span.set_attribute("exception.type", type(error).__name__)
    span.set_attribute("exception.message", message)


@contextmanager
def create_span(
    name: str,
    attributes: Mapping[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Run a block inside a span named ``name``.

    Attributes whose value is None are not set. Exceptions are recorded on
    the span and re-raised unchanged.
    """
    with get_tracer().start_as_current_span(
        name,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        for key, value in (attributes or {}).items():
            if value is not None:
                span.set_attribute(key, value)
        try:
            yield span
        except Exception as e:
            _mark_failed(span, e)
            raise


__all__ = ["TRACER_NAME", "create_span", "get_tracer", "reset_tracer", "set_tracer"]
