"""Import cache: each (requester, reference) pair is resolved at most once.

The cache remembers, for every ``(base canonical URL, reference)`` key, which
resolver answered and what it returned, or that the cascade was exhausted.
Entries are created on the first attempt and never change afterwards; the
cache never evicts. Parsed stylesheets are memoized per canonical URL so a
stylesheet reached through different references is parsed once.

``ImportCache`` and ``AsyncImportCache`` share all of this logic through
generator steps. They differ only in the driver: the synchronous cache runs
steps inline, the asynchronous one awaits importers and parsers that
suspend.

A cache may be retained by the caller and reused across sequential
compiles. It has no internal locking, so two compiles must not run against
the same cache concurrently.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

from sass_core.compilation.errors import (
    AmbiguousImportError,
    ConfigurationError,
    ImportNotFoundError,
    SassException,
    SassSyntaxError,
    SourceSpan,
)
from sass_core.effects import AwaitableInSyncModeError, Call, Steps, run_async, run_sync
from sass_core.importers.base import AnyImporter
from sass_core.importers.filesystem import FilesystemImporter
from sass_core.resolution.cascade import ResolverEntry, ResolverSet
from sass_core.syntax import Syntax

if TYPE_CHECKING:
    from sass_core.toolchain import Parser

logger = structlog.get_logger(__name__)

CacheKey = tuple[str | None, str]


@dataclass(frozen=True)
class CachedImport:
    """Outcome of a successful resolution.

    Attributes:
        canonical_url: Canonical URL of the stylesheet.
        contents: Raw stylesheet text.
        syntax: Syntax to parse with.
        resolver: The resolver that answered.
        is_dependency: Whether the stylesheet was reached through a secondary
            resolver (directly or via a stylesheet that was).
        source_map_url: URL to reference from source maps.
    """

    canonical_url: str
    contents: str
    syntax: Syntax
    resolver: ResolverEntry
    is_dependency: bool
    source_map_url: str | None = None


@dataclass(frozen=True)
class ImportedStylesheet:
    """A resolved and parsed stylesheet handed to the evaluator.

    Attributes:
        canonical_url: Canonical URL of the stylesheet.
        stylesheet: Parsed form produced by the external parser.
        syntax: Syntax the stylesheet was parsed with.
        is_dependency: See ``CachedImport.is_dependency``.
    """

    canonical_url: str
    stylesheet: Any
    syntax: Syntax
    is_dependency: bool


class BaseImportCache:
    """Resolution and memoization logic shared by both cache flavors."""

    def __init__(
        self,
        resolvers: ResolverSet | None = None,
        *,
        entry_importer: AnyImporter | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            resolvers: Secondary resolvers of the cascade.
            entry_importer: Importer used for relative resolution of the entry
                point (``context=None``); defaults to the current directory.
        """
        self.resolvers = resolvers if resolvers is not None else ResolverSet()
        self.entry_importer: AnyImporter = (
            entry_importer if entry_importer is not None else FilesystemImporter(".")
        )
        self._results: dict[CacheKey, CachedImport | AmbiguousImportError | None] = {}
        self._by_url: dict[str, CachedImport] = {}
        self._parsed: dict[str, Any] = {}

    @property
    def loaded_urls(self) -> tuple[str, ...]:
        """Canonical URLs loaded through this cache, in first-load order."""
        return tuple(self._by_url)

    def lookup(self, reference: str, base_url: str | None = None) -> CachedImport | None:
        """Return the cached stylesheet for a key without resolving anything."""
        cached = self._results.get((base_url, reference))
        return cached if isinstance(cached, CachedImport) else None

    def is_dependency(self, canonical_url: str | None) -> bool:
        """Whether ``canonical_url`` was loaded as a dependency."""
        if canonical_url is None:
            return False
        cached = self._by_url.get(canonical_url)
        return cached.is_dependency if cached is not None else False

    def seed(
        self,
        canonical_url: str,
        contents: str,
        syntax: Syntax,
        importer: AnyImporter | None = None,
    ) -> CachedImport:
        """Register an in-memory entry point.

        Later relative imports from ``canonical_url`` resolve through
        ``importer`` (or the entry importer).

        Args:
            canonical_url: URL of the in-memory stylesheet.
            contents: Its text.
            syntax: Its syntax.
            importer: Importer for relative resolution from it.

        Returns:
            The registered entry.
        """
        cached = CachedImport(
            canonical_url=canonical_url,
            contents=contents,
            syntax=syntax,
            resolver=ResolverEntry.relative_to(importer or self.entry_importer),
            is_dependency=False,
        )
        self._by_url[canonical_url] = cached
        # A new source under the same URL replaces the parsed form.
        self._parsed.pop(canonical_url, None)
        return cached

    def _relative_resolver(self, base_url: str | None) -> ResolverEntry | None:
        if base_url is None:
            return ResolverEntry.relative_to(self.entry_importer)
        requester = self._by_url.get(base_url)
        if requester is None:
            return None
        return ResolverEntry.relative_to(requester.resolver.importer)

    def resolve_steps(self, reference: str, base_url: str | None = None) -> Steps[CachedImport]:
        """Resolve ``reference`` for the requester ``base_url``, memoized.

        Raises:
            ImportNotFoundError: If the cascade is (or was previously) exhausted.
            AmbiguousImportError: If a resolver found several candidates.
        """
        key: CacheKey = (base_url, reference)
        if key in self._results:
            cached = self._results[key]
            if cached is None:
                raise ImportNotFoundError(reference, base_url)
            if isinstance(cached, AmbiguousImportError):
                raise cached
            return cached

        start = time.perf_counter()
        try:
            answer = yield from self.resolvers.resolve_steps(
                reference, base_url, self._relative_resolver(base_url)
            )
        except AmbiguousImportError as e:
            self._results[key] = e
            raise
        if answer is None:
            self._results[key] = None
            logger.debug("import_not_found", reference=reference, base_url=base_url)
            raise ImportNotFoundError(reference, base_url)

        entry, result = answer
        requester_is_dependency = self.is_dependency(base_url)
        cached = CachedImport(
            canonical_url=result.canonical_url,
            contents=result.contents,
            syntax=result.syntax,
            resolver=entry,
            is_dependency=requester_is_dependency or entry.loads_dependencies,
            source_map_url=result.source_map_url,
        )
        self._results[key] = cached
        self._by_url.setdefault(cached.canonical_url, cached)
        logger.debug(
            "import_resolved",
            reference=reference,
            base_url=base_url,
            url=cached.canonical_url,
            resolver=entry.kind.value,
            resolver_label=entry.label,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return cached

    def parse_steps(self, cached: CachedImport, parser: Parser) -> Steps[ImportedStylesheet]:
        """Parse a resolved stylesheet, memoized per canonical URL.

        Raises:
            SassSyntaxError: If the parser rejects the stylesheet.
        """
        url = cached.canonical_url
        if url not in self._parsed:
            try:
                self._parsed[url] = yield Call(parser.parse, (cached.contents, cached.syntax, url))
            except AwaitableInSyncModeError as e:
                raise ConfigurationError(
                    "Parser is asynchronous and cannot be used by a synchronous compile",
                    context={"url": url},
                ) from e
            except SassException:
                raise
            except Exception as e:
                raise SassSyntaxError(
                    str(e) or type(e).__name__, SourceSpan.from_exception(e, url)
                ) from e
        return ImportedStylesheet(
            canonical_url=url,
            stylesheet=self._parsed[url],
            syntax=cached.syntax,
            is_dependency=cached.is_dependency,
        )

    def import_steps(
        self, reference: str, base_url: str | None, parser: Parser
    ) -> Steps[ImportedStylesheet]:
        """Resolve then parse ``reference``."""
        cached = yield from self.resolve_steps(reference, base_url)
        return (yield from self.parse_steps(cached, parser))


class ImportCache(BaseImportCache):
    """Synchronous import cache.

    Example:
        >>> cache = ImportCache(ResolverSet(load_paths=["styles"]))
        >>> cached = cache.resolve("buttons")
        >>> cached.resolver.kind
        <ResolverKind.LOAD_PATH: 'load_path'>
        >>> cache.resolve("buttons") is cached  # no resolver runs again
        True
    """

    def resolve(self, reference: str, base_url: str | None = None) -> CachedImport:
        """Resolve ``reference`` for the requester ``base_url``.

        Raises:
            ImportNotFoundError: If no resolver answers.
            AmbiguousImportError: If a resolver found several candidates.
            ConfigurationError: If an importer is asynchronous.
        """
        return run_sync(self.resolve_steps(reference, base_url))

    def import_stylesheet(
        self, reference: str, base_url: str | None, parser: Parser
    ) -> ImportedStylesheet:
        """Resolve and parse ``reference``."""
        return run_sync(self.import_steps(reference, base_url, parser))


class AsyncImportCache(BaseImportCache):
    """Import cache whose resolution may suspend.

    Accepts both synchronous and asynchronous importers. Resolution order
    and memoization are identical to ``ImportCache``.
    """

    async def resolve(self, reference: str, base_url: str | None = None) -> CachedImport:
        """Resolve ``reference``; see ``ImportCache.resolve``."""
        return await run_async(self.resolve_steps(reference, base_url))

    async def import_stylesheet(
        self, reference: str, base_url: str | None, parser: Parser
    ) -> ImportedStylesheet:
        """Resolve and parse ``reference``."""
        return await run_async(self.import_steps(reference, base_url, parser))


__all__ = [
    "AsyncImportCache",
    "BaseImportCache",
    "CachedImport",
    "ImportCache",
    "ImportedStylesheet",
]
