"""The ordered import-resolution cascade.

Resolvers form a closed set of variants, tried in this fixed order:

    1. ENTRY_RELATIVE: the importer that loaded the requesting stylesheet,
       resolving relative to its canonical URL (for the entry point, relative
       to the given path)
    2. EXPLICIT: each caller-supplied importer, in order
    3. LOAD_PATH: each configured load path, in order
    4. ENVIRONMENT: each directory listed in ``SASS_PATH``, in order
    5. PACKAGE: ``package:`` resolution, when a package config was supplied

The first resolver to answer wins and later ones are never invoked. An
``AmbiguousImportError`` from any resolver ends the attempt immediately.
Resolvers are consulted strictly one at a time.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import structlog

from sass_core.compilation.errors import ConfigurationError
from sass_core.effects import AwaitableInSyncModeError, Call, Steps
from sass_core.importers.base import AnyImporter, ImporterResult
from sass_core.importers.environment import load_paths_from_environment
from sass_core.importers.filesystem import FilesystemImporter
from sass_core.importers.package import PackageConfig, PackageImporter

logger = structlog.get_logger(__name__)


class ResolverKind(str, Enum):
    """Variant of a resolver, in cascade priority order."""

    ENTRY_RELATIVE = "entry_relative"
    EXPLICIT = "explicit"
    LOAD_PATH = "load_path"
    ENVIRONMENT = "environment"
    PACKAGE = "package"


@dataclass(frozen=True)
class ResolverEntry:
    """A resolver placed in the cascade.

    Attributes:
        kind: Which cascade variant this resolver belongs to.
        importer: The importer doing the work.
        label: Human-readable name for logs (e.g. ``load_path:vendor``).
    """

    kind: ResolverKind
    importer: AnyImporter
    label: str

    @property
    def loads_dependencies(self) -> bool:
        """Whether stylesheets found by this resolver count as dependencies."""
        return self.kind is not ResolverKind.ENTRY_RELATIVE

    @classmethod
    def relative_to(cls, importer: AnyImporter) -> ResolverEntry:
        """Entry-relative resolver backed by ``importer``."""
        return cls(ResolverKind.ENTRY_RELATIVE, importer, f"relative:{importer!r}")


class ResolverSet:
    """Secondary resolvers of the cascade, in priority order.

    The entry-relative resolver is not stored here: it depends on which
    stylesheet is importing, and is supplied per resolution.

    Example:
        >>> resolvers = ResolverSet(load_paths=["vendor"], environment_load_paths=[])
        >>> [entry.label for entry in resolvers]
        ['load_path:vendor']
    """

    def __init__(
        self,
        *,
        importers: Iterable[AnyImporter] = (),
        load_paths: Iterable[str | Path] = (),
        environment_load_paths: Iterable[str | Path] | None = None,
        package_config: PackageConfig | None = None,
    ) -> None:
        """Build the cascade.

        Args:
            importers: Explicit importers, tried in the given order.
            load_paths: Load path directories, tried in the given order.
            environment_load_paths: Directories standing in for ``SASS_PATH``;
                None reads the environment, an empty iterable disables it.
            package_config: Package configuration for ``package:`` URLs.
        """
        if environment_load_paths is None:
            environment_load_paths = load_paths_from_environment()

        entries: list[ResolverEntry] = []
        for index, importer in enumerate(importers):
            if importer is None:
                raise ConfigurationError(
                    "Importer list contains None",
                    context={"index": index},
                )
            entries.append(ResolverEntry(ResolverKind.EXPLICIT, importer, f"importer:{importer!r}"))
        for path in load_paths:
            if str(path):
                entries.append(
                    ResolverEntry(
                        ResolverKind.LOAD_PATH, FilesystemImporter(path), f"load_path:{path}"
                    )
                )
        for path in environment_load_paths:
            if str(path):
                entries.append(
                    ResolverEntry(
                        ResolverKind.ENVIRONMENT, FilesystemImporter(path), f"environment:{path}"
                    )
                )
        if package_config is not None:
            entries.append(
                ResolverEntry(ResolverKind.PACKAGE, PackageImporter(package_config), "package")
            )
        self._entries: tuple[ResolverEntry, ...] = tuple(entries)

    @property
    def entries(self) -> tuple[ResolverEntry, ...]:
        """Secondary resolvers in priority order."""
        return self._entries

    def __iter__(self) -> Iterator[ResolverEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def cascade(self, relative: ResolverEntry | None) -> Sequence[ResolverEntry]:
        """Full cascade for one resolution: the relative resolver, then the rest."""
        if relative is None:
            return self._entries
        return (relative, *self._entries)

    def resolve_steps(
        self,
        reference: str,
        base_url: str | None,
        relative: ResolverEntry | None,
    ) -> Steps[tuple[ResolverEntry, ImporterResult] | None]:
        """Try each resolver in order, returning the first answer.

        Only the entry-relative resolver sees ``base_url``; the others resolve
        ``reference`` as given.

        Args:
            reference: Reference string being resolved.
            base_url: Canonical URL of the requester, or None for the entry point.
            relative: Entry-relative resolver for the requester, if any.

        Returns:
            ``(resolver, result)`` for the first resolver that answered, or
            None if every resolver declined.

        Raises:
            AmbiguousImportError: Propagated from the resolver that raised it.
            ConfigurationError: If an importer misbehaves (returns an awaitable
                in synchronous mode, or a value that is not an ImporterResult).
        """
        for entry in self.cascade(relative):
            entry_base = base_url if entry.kind is ResolverKind.ENTRY_RELATIVE else None
            try:
                result = yield Call(entry.importer.resolve, (reference, entry_base))
            except AwaitableInSyncModeError as e:
                raise ConfigurationError(
                    f"Importer {entry.label} is asynchronous and cannot be used "
                    "by a synchronous compile",
                    suggestion="Use the asynchronous compile functions with asynchronous importers",
                    context={"resolver": entry.label, "reference": reference},
                ) from e
            if result is None:
                logger.debug("resolver_declined", resolver=entry.label, reference=reference)
                continue
            if not isinstance(result, ImporterResult):
                raise ConfigurationError(
                    f"Importer {entry.label} returned {type(result).__name__}, "
                    "expected ImporterResult or None",
                    context={"resolver": entry.label, "reference": reference},
                )
            return entry, result
        return None


__all__ = ["ResolverEntry", "ResolverKind", "ResolverSet"]
