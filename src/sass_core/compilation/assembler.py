"""Output assembly: charset marker and source-map packaging.

When a charset marker is requested and the CSS contains a non-ASCII
character, exactly one marker is prepended:

- ``OutputStyle.EXPANDED``: an ``@charset "UTF-8";`` declaration
- ``OutputStyle.COMPRESSED``: a UTF-8 byte-order mark

ASCII-only CSS never gets a marker. The source map is shifted to account for
the marker; its ``target_url`` stays unset and no ``sourceMappingURL``
comment is added. Persisting the map and pointing at it is the caller's job.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

import structlog

from sass_core.compilation.result import CompileResult
from sass_core.source_map import SourceMapBuilder

logger = structlog.get_logger(__name__)

CHARSET_DECLARATION = '@charset "UTF-8";\n'
BYTE_ORDER_MARK = "\ufeff"


class OutputStyle(str, Enum):
    """Formatting of the generated CSS."""

    EXPANDED = "expanded"
    COMPRESSED = "compressed"


def charset_prefix(css: str, style: OutputStyle, charset: bool) -> str:
    """Return the marker to prepend to ``css``, or an empty string.

    Example:
        >>> charset_prefix("a { content: 'café' }", OutputStyle.EXPANDED, True)
        '@charset "UTF-8";\\n'
        >>> charset_prefix("a { color: red }", OutputStyle.EXPANDED, True)
        ''
    """
    if not charset or css.isascii():
        return ""
    return BYTE_ORDER_MARK if style is OutputStyle.COMPRESSED else CHARSET_DECLARATION


def assemble(
    css: str,
    source_map_builder: SourceMapBuilder | None,
    *,
    style: OutputStyle,
    charset: bool,
    source_map: bool,
    loaded_urls: Iterable[str],
) -> CompileResult:
    """Package serialized CSS into a CompileResult.

    Args:
        css: CSS text from the serializer.
        source_map_builder: Source-map builder from the serializer.
        style: Output style the CSS was rendered in.
        charset: Whether a charset marker may be emitted.
        source_map: Whether a source map was requested.
        loaded_urls: Canonical URLs loaded by the run.

    Returns:
        The assembled result.
    """
    prefix = charset_prefix(css, style, charset)

    built = None
    if source_map:
        if source_map_builder is None:
            logger.warning("source_map_unavailable", reason="serializer returned no builder")
        else:
            built = source_map_builder.build().with_prefix(prefix)
            if built.target_url is not None:
                built = built.model_copy(update={"target_url": None})

    return CompileResult(
        css=prefix + css,
        source_map=built,
        loaded_urls=frozenset(loaded_urls),
    )


__all__ = [
    "BYTE_ORDER_MARK",
    "CHARSET_DECLARATION",
    "OutputStyle",
    "assemble",
    "charset_prefix",
]
