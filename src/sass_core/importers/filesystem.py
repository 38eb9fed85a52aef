"""Filesystem importer.

Resolves references to files on disk using the Sass lookup rules:

- A reference with an explicit ``.scss``/``.sass``/``.css`` extension matches
  the file itself or its partial (leading underscore).
- A reference without an extension tries ``.sass`` and ``.scss`` (plain and
  partial); only if none exist does it try ``.css``.
- If nothing matched, the reference is tried as a directory containing an
  ``index`` file.
- More than one match in the same tier is ambiguous.

Canonical URLs are absolute ``file:`` URLs.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote, urlparse

import structlog

from sass_core.compilation.errors import AmbiguousImportError
from sass_core.importers.base import ImporterResult
from sass_core.syntax import Syntax

logger = structlog.get_logger(__name__)

_SASS_EXTENSIONS = (".sass", ".scss")
_ALL_EXTENSIONS = (*_SASS_EXTENSIONS, ".css")


def path_to_url(path: Path) -> str:
    """Convert a filesystem path to a canonical ``file:`` URL."""
    return path.resolve().as_uri()


def url_to_path(url: str) -> Path:
    """Convert a ``file:`` URL back to a filesystem path.

    Raises:
        ValueError: If ``url`` is not a ``file:`` URL.
    """
    parsed = urlparse(url)
    if parsed.scheme != "file":
        raise ValueError(f"Not a file: URL: {url}")
    path = unquote(parsed.path)
    # file:///C:/x on Windows parses to /C:/x
    if len(path) > 2 and path[0] == "/" and path[2] == ":":
        path = path[1:]
    return Path(path)


def _existing(candidates: list[Path]) -> list[Path]:
    return [candidate for candidate in candidates if candidate.is_file()]


def _with_partials(path: Path, extensions: tuple[str, ...]) -> list[Path]:
    candidates: list[Path] = []
    for extension in extensions:
        candidates.append(path.with_name(f"_{path.name}{extension}"))
        candidates.append(path.with_name(f"{path.name}{extension}"))
    return candidates


def _try_path(path: Path) -> list[Path]:
    """Return every existing file ``path`` could refer to, in the first tier that matches."""
    if path.suffix.lower() in _ALL_EXTENSIONS:
        return _existing([path.with_name(f"_{path.name}"), path])
    found = _existing(_with_partials(path, _SASS_EXTENSIONS))
    if found:
        return found
    return _existing(_with_partials(path, (".css",)))


def resolve_file(path: Path, reference: str, base_url: str | None = None) -> Path | None:
    """Apply the partial, extension and index lookup rules to ``path``.

    Args:
        path: Path the reference points to, without lookup rules applied.
        reference: Original reference string, for error messages.
        base_url: Canonical URL of the requester, for error messages.

    Returns:
        The single matching file, or None.

    Raises:
        AmbiguousImportError: If several files match equally well.
    """
    found = _try_path(path)
    if not found and path.suffix.lower() not in _ALL_EXTENSIONS and path.is_dir():
        found = _try_path(path / "index")
    if len(found) > 1:
        raise AmbiguousImportError(
            reference,
            [path_to_url(candidate) for candidate in found],
            base_url,
        )
    return found[0] if found else None


class FilesystemImporter:
    """Importer that loads stylesheets relative to a root directory.

    When consulted for relative resolution (``base_url`` is a ``file:`` URL),
    references are resolved against the requester's directory; otherwise
    against ``load_path``.

    Example:
        >>> importer = FilesystemImporter("styles")
        >>> result = importer.resolve("buttons", None)  # styles/_buttons.scss
        >>> result.canonical_url
        'file:///project/styles/_buttons.scss'
    """

    def __init__(self, load_path: str | Path) -> None:
        """Initialize FilesystemImporter.

        Args:
            load_path: Root directory for non-relative resolution.
        """
        self.load_path = Path(load_path)

    def resolve(self, reference: str, base_url: str | None) -> ImporterResult | None:
        """Resolve ``reference`` to a file on disk.

        Args:
            reference: Relative path, absolute path, or ``file:`` URL.
            base_url: Canonical URL of the requester for relative resolution.

        Returns:
            The loaded file, or None if no file matches.

        Raises:
            AmbiguousImportError: If several files match equally well.
        """
        target = self._target_path(reference, base_url)
        if target is None:
            return None
        resolved = resolve_file(target, reference, base_url)
        if resolved is None:
            return None
        canonical_url = path_to_url(resolved)
        logger.debug("filesystem_import_found", reference=reference, url=canonical_url)
        return ImporterResult(
            canonical_url=canonical_url,
            contents=resolved.read_text(encoding="utf-8"),
            syntax=Syntax.for_path(resolved.name),
        )

    def _target_path(self, reference: str, base_url: str | None) -> Path | None:
        parsed = urlparse(reference)
        if parsed.scheme == "file":
            return url_to_path(reference)
        # Other schemes (package:, http:) belong to other importers; a single
        # letter is a Windows drive, not a scheme.
        if parsed.scheme and len(parsed.scheme) > 1:
            return None
        relative = Path(unquote(reference))
        if relative.is_absolute():
            return relative
        if base_url is not None and base_url.startswith("file:"):
            return url_to_path(base_url).parent / relative
        return self.load_path / relative

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FilesystemImporter):
            return NotImplemented
        return self.load_path.resolve() == other.load_path.resolve()

    def __hash__(self) -> int:
        return hash(("FilesystemImporter", self.load_path.resolve()))

    def __repr__(self) -> str:
        return f"FilesystemImporter({str(self.load_path)!r})"


__all__ = ["FilesystemImporter", "path_to_url", "resolve_file", "url_to_path"]
