"""Source map models and Source Map Revision 3 encoding.

The serializer reports mappings as ``Mapping`` records with zero-based
positions. ``SourceMap.to_dict`` produces the v3 JSON structure, encoding
the mappings as base64 VLQ segments.

Example:
    >>> source_map = SourceMap(
    ...     sources=["file:///app/main.scss"],
    ...     mappings=[Mapping(generated_line=0, generated_column=0, original_line=2)],
    ... )
    >>> source_map.to_dict()["mappings"]
    'AAEA'
"""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

_BASE64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_VLQ_SHIFT = 5
_VLQ_CONTINUATION = 1 << _VLQ_SHIFT
_VLQ_MASK = _VLQ_CONTINUATION - 1
_BOM = "\ufeff"


def encode_vlq(value: int) -> str:
    """Encode a signed integer as a base64 VLQ.

    Example:
        >>> encode_vlq(0), encode_vlq(-1), encode_vlq(16)
        ('A', 'D', 'gB')
    """
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    encoded = []
    while True:
        digit = vlq & _VLQ_MASK
        vlq >>= _VLQ_SHIFT
        if vlq:
            digit |= _VLQ_CONTINUATION
        encoded.append(_BASE64[digit])
        if not vlq:
            return "".join(encoded)


class Mapping(BaseModel):
    """One generated-to-original position mapping (all positions zero-based)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    generated_line: int = Field(..., ge=0, description="Line in the generated CSS")
    generated_column: int = Field(..., ge=0, description="Column in the generated CSS")
    source_index: int = Field(default=0, ge=0, description="Index into sources")
    original_line: int = Field(default=0, ge=0, description="Line in the source stylesheet")
    original_column: int = Field(default=0, ge=0, description="Column in the source stylesheet")
    name_index: int | None = Field(default=None, ge=0, description="Index into names")


class SourceMap(BaseModel):
    """A source map for one compiled stylesheet.

    Attributes:
        version: Source map revision, always 3.
        sources: Canonical URLs of the source stylesheets.
        sources_content: Optional embedded source text, parallel to sources.
        names: Symbol names referenced by mappings.
        mappings: Position mappings, ordered by generated position.
        target_url: URL of the generated CSS. Left unset by the compiler; the
            caller persisting the map fills it in.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: int = Field(default=3, description="Source map revision")
    sources: list[str] = Field(default_factory=list, description="Source URLs")
    sources_content: list[str | None] | None = Field(
        default=None,
        description="Embedded source text parallel to sources",
    )
    names: list[str] = Field(default_factory=list, description="Referenced names")
    mappings: list[Mapping] = Field(default_factory=list, description="Position mappings")
    target_url: str | None = Field(default=None, description="URL of the generated file")

    def with_prefix(self, prefix: str) -> SourceMap:
        """Return a copy whose mappings account for text prepended to the CSS.

        Each newline in ``prefix`` moves every mapping down one line. Text
        after the last newline moves mappings on the first line right. A
        byte-order mark occupies no column.

        Args:
            prefix: Text prepended to the generated CSS.

        Returns:
            The shifted source map.
        """
        text = prefix.replace(_BOM, "")
        if not text:
            return self
        line_shift = text.count("\n")
        column_shift = len(text.rsplit("\n", 1)[-1])
        shifted = [
            mapping.model_copy(
                update={
                    "generated_line": mapping.generated_line + line_shift,
                    "generated_column": mapping.generated_column
                    + (column_shift if mapping.generated_line == 0 else 0),
                }
            )
            for mapping in self.mappings
        ]
        return self.model_copy(update={"mappings": shifted})

    def encoded_mappings(self) -> str:
        """Encode mappings as the v3 ``mappings`` string."""
        lines: list[str] = []
        segments: list[str] = []
        current_line = 0
        previous_column = 0
        previous_source = previous_line = previous_original_column = previous_name = 0
        for mapping in sorted(self.mappings, key=lambda m: (m.generated_line, m.generated_column)):
            while current_line < mapping.generated_line:
                lines.append(",".join(segments))
                segments = []
                current_line += 1
                previous_column = 0
            segment = (
                encode_vlq(mapping.generated_column - previous_column)
                + encode_vlq(mapping.source_index - previous_source)
                + encode_vlq(mapping.original_line - previous_line)
                + encode_vlq(mapping.original_column - previous_original_column)
            )
            if mapping.name_index is not None:
                segment += encode_vlq(mapping.name_index - previous_name)
                previous_name = mapping.name_index
            segments.append(segment)
            previous_column = mapping.generated_column
            previous_source = mapping.source_index
            previous_line = mapping.original_line
            previous_original_column = mapping.original_column
        lines.append(",".join(segments))
        return ";".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Return the Source Map v3 JSON structure."""
        data: dict[str, Any] = {
            "version": self.version,
            "sources": list(self.sources),
            "names": list(self.names),
            "mappings": self.encoded_mappings(),
        }
        if self.sources_content is not None:
            data["sourcesContent"] = list(self.sources_content)
        if self.target_url is not None:
            data["file"] = self.target_url
        return data

    def to_json(self, *, indent: int | None = None) -> str:
        """Serialize as Source Map v3 JSON."""
        return json.dumps(self.to_dict(), indent=indent)


@runtime_checkable
class SourceMapBuilder(Protocol):
    """Deferred source map produced by the serializer."""

    def build(self) -> SourceMap:
        """Build the source map."""
        ...


__all__ = ["Mapping", "SourceMap", "SourceMapBuilder", "encode_vlq"]
