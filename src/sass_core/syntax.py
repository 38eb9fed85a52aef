"""Stylesheet syntaxes understood by the compiler.

The syntax of a stylesheet decides how the external parser reads its text.
Loaded files infer it from their extension; in-memory sources take an
explicit hint and default to SCSS.

Example:
    >>> Syntax.for_path("styles/_buttons.sass")
    <Syntax.SASS: 'sass'>
    >>> Syntax.for_path("reset.css")
    <Syntax.CSS: 'css'>
"""

from __future__ import annotations

from enum import Enum
from pathlib import PurePosixPath
from urllib.parse import urlparse


class Syntax(str, Enum):
    """Syntax of a stylesheet.

    Attributes:
        SCSS: The CSS-superset syntax (``.scss``).
        SASS: The indented syntax (``.sass``).
        CSS: Plain CSS (``.css``).
    """

    SCSS = "scss"
    SASS = "sass"
    CSS = "css"

    @property
    def extension(self) -> str:
        """File extension (with leading dot) for this syntax."""
        return f".{self.value}"

    @classmethod
    def for_path(cls, path: str) -> Syntax:
        """Infer the syntax from a path or URL suffix.

        Unknown suffixes fall back to SCSS.

        Args:
            path: Filesystem path or URL.

        Returns:
            The inferred syntax.
        """
        if "://" in path or path.startswith(("file:", "package:")):
            path = urlparse(path).path
        suffix = PurePosixPath(path).suffix.lower()
        if suffix == ".sass":
            return cls.SASS
        if suffix == ".css":
            return cls.CSS
        return cls.SCSS

    @classmethod
    def from_hint(cls, hint: Syntax | str | None, *, indented: bool = False) -> Syntax:
        """Resolve an explicit syntax hint, honoring the legacy ``indented`` flag.

        Args:
            hint: Syntax or syntax name, or None for the default.
            indented: Legacy flag selecting the indented syntax.

        Returns:
            The selected syntax.

        Raises:
            ValueError: If ``hint`` names no known syntax.
        """
        if hint is None:
            return cls.SASS if indented else cls.SCSS
        if isinstance(hint, Syntax):
            return hint
        return cls(hint.lower())


__all__ = ["Syntax"]
