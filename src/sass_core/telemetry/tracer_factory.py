"""Process-wide cache of OpenTelemetry tracers.

Compilations may run on several threads (a build tool compiling many entry
points in a pool), so tracers are created lazily behind a lock. When the
global OpenTelemetry state cannot produce a tracer, the cache switches to
``NoOpTracer`` for the rest of the process: spans are never worth a failed
compile. ``reset_tracer`` restores a clean state between tests.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from opentelemetry import trace

if TYPE_CHECKING:
    from opentelemetry.trace import Tracer


class _TracerCache:
    def __init__(self) -> None:
        self.tracers: dict[str, Tracer] = {}
        self.disabled = False
        self.lock = threading.Lock()

    def get(self, name: str) -> Tracer:
        cached = self.tracers.get(name)
        if cached is not None:
            return cached
        with self.lock:
            cached = self.tracers.get(name)
            if cached is not None:
                return cached
            if not self.disabled:
                try:
                    cached = self.tracers[name] = trace.get_tracer(name)
                    return cached
                except Exception:
                    # Corrupted global OTel state, seen under test fixtures
                    self.disabled = True
        return trace.NoOpTracer()


_cache = _TracerCache()


def get_tracer(name: str = "sass_core") -> Tracer:
    """Return the tracer called ``name``, creating it on first use.

    Args:
        name: Instrumenting module name.

    Returns:
        The cached tracer, or a NoOpTracer once initialization has failed.

    Example:
        >>> tracer = get_tracer("sass_core")
        >>> with tracer.start_as_current_span("compile.evaluate"):
        ...     pass
    """
    return _cache.get(name)


def set_tracer(name: str, tracer: Tracer | None) -> None:
    """Install ``tracer`` under ``name``; None forgets the cached one."""
    with _cache.lock:
        if tracer is None:
            _cache.tracers.pop(name, None)
        else:
            _cache.tracers[name] = tracer


def reset_tracer() -> None:
    """Forget every cached tracer and re-enable initialization."""
    with _cache.lock:
        _cache.tracers.clear()
        _cache.disabled = False


__all__ = ["get_tracer", "reset_tracer", "set_tracer"]
