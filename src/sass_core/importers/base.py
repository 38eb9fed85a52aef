"""Importer protocols and the result they produce.

An importer is one resolution strategy. Given a reference string (and, for
the entry-relative step, the canonical URL of the requesting stylesheet) it
either declines by returning None or answers with an ``ImporterResult``.

Importers may raise ``AmbiguousImportError`` when several candidates match
equally well; that error ends the resolution attempt.

Example:
    >>> class MemoryImporter:
    ...     def __init__(self, files: dict[str, str]) -> None:
    ...         self.files = files
    ...     def resolve(self, reference: str, base_url: str | None) -> ImporterResult | None:
    ...         if reference not in self.files:
    ...             return None
    ...         return ImporterResult(
    ...             canonical_url=f"memory:{reference}",
    ...             contents=self.files[reference],
    ...             syntax=Syntax.SCSS,
    ...         )
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from sass_core.syntax import Syntax


class ImporterResult(BaseModel):
    """A successful answer from an importer.

    Attributes:
        canonical_url: Normalized identifier of the stylesheet. Used as a cache
            key and as the base for relative imports from this stylesheet.
        contents: Raw stylesheet text.
        syntax: Syntax to parse ``contents`` with.
        source_map_url: Optional URL to use for this stylesheet in source maps.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    canonical_url: str = Field(
        ...,
        min_length=1,
        description="Canonical URL of the loaded stylesheet",
    )
    contents: str = Field(
        ...,
        description="Raw stylesheet text",
    )
    syntax: Syntax = Field(
        default=Syntax.SCSS,
        description="Syntax used to parse the contents",
    )
    source_map_url: str | None = Field(
        default=None,
        description="URL to reference from source maps (defaults to canonical_url)",
    )


@runtime_checkable
class Importer(Protocol):
    """Synchronous resolution strategy."""

    def resolve(self, reference: str, base_url: str | None) -> ImporterResult | None:
        """Resolve ``reference``.

        Args:
            reference: The reference string from the import statement.
            base_url: Canonical URL of the requesting stylesheet when this
                importer is consulted for relative resolution, else None.

        Returns:
            The loaded stylesheet, or None to decline.
        """
        ...


@runtime_checkable
class AsyncImporter(Protocol):
    """Resolution strategy that may suspend (network, async filesystem)."""

    async def resolve(self, reference: str, base_url: str | None) -> ImporterResult | None:
        """Resolve ``reference``; see ``Importer.resolve``."""
        ...


class CallableImporter:
    """Adapt a plain function into an importer.

    The function may be synchronous or a coroutine function; in the latter
    case the importer can only be used for asynchronous compiles.

    Example:
        >>> importer = CallableImporter(lambda ref, base: None, name="never")
        >>> importer.resolve("anything", None) is None
        True
    """

    def __init__(
        self,
        fn: Callable[[str, str | None], ImporterResult | None | Awaitable[ImporterResult | None]],
        *,
        name: str | None = None,
    ) -> None:
        """Initialize with the resolving function.

        Args:
            fn: Function taking ``(reference, base_url)``.
            name: Label used in logs.
        """
        self._fn = fn
        self.name = name or getattr(fn, "__name__", "callable")

    def resolve(
        self, reference: str, base_url: str | None
    ) -> ImporterResult | None | Awaitable[ImporterResult | None]:
        """Delegate to the wrapped function."""
        return self._fn(reference, base_url)

    def __repr__(self) -> str:
        return f"CallableImporter({self.name!r})"


AnyImporter = Importer | AsyncImporter | CallableImporter


__all__ = ["AnyImporter", "AsyncImporter", "CallableImporter", "Importer", "ImporterResult"]
