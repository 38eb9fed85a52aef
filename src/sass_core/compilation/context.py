"""Per-run context handed to the evaluator.

The context is the evaluator's only way back into the compiler. It loads
imports through the run's import cache and routes diagnostics:

- plain warnings go to the logger
- deprecation warnings go through the run's ``DeprecationThrottle``
- with ``quiet_deps``, warnings whose origin is a dependency are dropped

``CompilationContext.load_import`` returns the imported stylesheet
directly. ``AsyncCompilationContext.load_import`` is a coroutine, so an
asynchronous evaluator can await importers that suspend. Both run the same
resolution steps.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

import structlog

from sass_core.compilation.errors import SourceSpan
from sass_core.diagnostics.logger import Logger
from sass_core.diagnostics.throttle import DeprecationThrottle
from sass_core.effects import Steps, run_async, run_sync
from sass_core.resolution.import_cache import BaseImportCache, ImportedStylesheet
from sass_core.toolchain import Parser

logger = structlog.get_logger(__name__)


class BaseCompilationContext:
    """State shared by one compilation run.

    Attributes:
        cache: Import cache for the run.
        parser: Parser used for imported stylesheets.
        logger: Receiver of non-deprecation diagnostics.
        throttle: Deprecation throttle for the run.
        quiet_deps: Whether warnings from dependencies are dropped.
    """

    def __init__(
        self,
        cache: BaseImportCache,
        parser: Parser,
        *,
        logger: Logger,
        throttle: DeprecationThrottle,
        quiet_deps: bool = False,
        functions: Mapping[str, Callable[..., Any]] | None = None,
    ) -> None:
        """Initialize the context.

        Args:
            cache: Import cache for the run.
            parser: Parser used for imported stylesheets.
            logger: Receiver of non-deprecation diagnostics.
            throttle: Deprecation throttle for the run.
            quiet_deps: Drop warnings whose origin is a dependency.
            functions: Custom functions exposed to the evaluator.
        """
        self.cache = cache
        self.parser = parser
        self.logger = logger
        self.throttle = throttle
        self.quiet_deps = quiet_deps
        self._functions: Mapping[str, Callable[..., Any]] = MappingProxyType(dict(functions or {}))
        self._loaded: dict[str, None] = {}
        self.suppressed_warnings = 0

    @property
    def functions(self) -> Mapping[str, Callable[..., Any]]:
        """Custom functions, keyed by signature (read-only)."""
        return self._functions

    @property
    def loaded_urls(self) -> tuple[str, ...]:
        """Canonical URLs loaded during this run, in first-load order."""
        return tuple(self._loaded)

    def record_loaded(self, canonical_url: str) -> None:
        """Note that ``canonical_url`` was loaded by this run."""
        self._loaded.setdefault(canonical_url, None)

    def import_steps(self, reference: str, base_url: str | None) -> Steps[ImportedStylesheet]:
        """Resolution and parsing steps for one import site."""
        imported = yield from self.cache.import_steps(reference, base_url, self.parser)
        self.record_loaded(imported.canonical_url)
        return imported

    def is_dependency(self, canonical_url: str | None) -> bool:
        """Whether ``canonical_url`` was loaded as a dependency."""
        return self.cache.is_dependency(canonical_url)

    def warn(
        self,
        message: str,
        *,
        deprecation: str | None = None,
        span: SourceSpan | None = None,
        origin_url: str | None = None,
    ) -> None:
        """Report a warning from the evaluator.

        Args:
            message: Warning text.
            deprecation: Deprecation kind, for deprecation warnings.
            span: Location the warning refers to.
            origin_url: Canonical URL of the stylesheet that produced the
                warning; defaults to the span's URL.
        """
        origin = origin_url if origin_url is not None else (span.url if span else None)
        if self.quiet_deps and self.is_dependency(origin):
            self.suppressed_warnings += 1
            logger.debug(
                "dependency_warning_suppressed", origin_url=origin, deprecation=deprecation
            )
            return
        if deprecation is not None:
            self.throttle.report(deprecation, message, span)
        else:
            self.logger.warn(message, span=span)

    def debug(self, message: str, span: SourceSpan | None = None) -> None:
        """Forward a debug message from the evaluator to the logger."""
        self.logger.debug(message, span=span)


class CompilationContext(BaseCompilationContext):
    """Context for synchronous evaluators."""

    def load_import(self, reference: str, base_url: str | None = None) -> ImportedStylesheet:
        """Resolve and parse an import.

        Args:
            reference: Reference string from the import statement.
            base_url: Canonical URL of the importing stylesheet.

        Returns:
            The imported stylesheet.

        Raises:
            ImportNotFoundError: If no resolver answers.
            AmbiguousImportError: If a resolver found several candidates.
            SassSyntaxError: If the imported stylesheet does not parse.
            ConfigurationError: If an importer is asynchronous.
        """
        return run_sync(self.import_steps(reference, base_url))


class AsyncCompilationContext(BaseCompilationContext):
    """Context for asynchronous evaluators; ``load_import`` must be awaited."""

    async def load_import(self, reference: str, base_url: str | None = None) -> ImportedStylesheet:
        """Resolve and parse an import; see ``CompilationContext.load_import``."""
        return await run_async(self.import_steps(reference, base_url))


__all__ = ["AsyncCompilationContext", "BaseCompilationContext", "CompilationContext"]
