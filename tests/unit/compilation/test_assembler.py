"""Unit tests for output assembly."""

from __future__ import annotations

import pytest
import structlog

from sass_core.compilation.assembler import (
    BYTE_ORDER_MARK,
    CHARSET_DECLARATION,
    OutputStyle,
    assemble,
    charset_prefix,
)
from sass_core.source_map import Mapping, SourceMap


class _Builder:
    def __init__(self, source_map: SourceMap) -> None:
        self.source_map = source_map
        self.built = 0

    def build(self) -> SourceMap:
        self.built += 1
        return self.source_map


def _single_mapping_map(target_url: str | None = None) -> SourceMap:
    return SourceMap(
        sources=["memory:a.scss"],
        mappings=[Mapping(generated_line=0, generated_column=0)],
        target_url=target_url,
    )


class TestCharsetPrefix:
    """Tests for charset marker selection."""

    @pytest.mark.requirement("FR-006")
    def test_ascii_gets_nothing(self) -> None:
        """Test ASCII-only CSS never gets a marker."""
        for style in OutputStyle:
            assert charset_prefix("a{b:c}", style, True) == ""

    @pytest.mark.requirement("FR-006")
    def test_expanded_gets_declaration(self) -> None:
        """Test expanded output gets an @charset declaration."""
        assert charset_prefix("a { content: 'é' }", OutputStyle.EXPANDED, True) == (
            CHARSET_DECLARATION
        )

    @pytest.mark.requirement("FR-006")
    def test_compressed_gets_bom(self) -> None:
        """Test compressed output gets a byte-order mark."""
        assert charset_prefix("a{content:'é'}", OutputStyle.COMPRESSED, True) == BYTE_ORDER_MARK

    @pytest.mark.requirement("FR-006")
    def test_disabled(self) -> None:
        """Test charset=False suppresses the marker."""
        assert charset_prefix("a { content: 'é' }", OutputStyle.EXPANDED, False) == ""


class TestAssemble:
    """Tests for assemble."""

    @pytest.mark.requirement("FR-006")
    def test_marker_prepended_once(self) -> None:
        """Test the CSS gets exactly one marker."""
        result = assemble(
            "a { content: 'é' }",
            None,
            style=OutputStyle.EXPANDED,
            charset=True,
            source_map=False,
            loaded_urls=[],
        )
        assert result.css == '@charset "UTF-8";\na { content: \'é\' }'
        assert result.css.count("@charset") == 1

    @pytest.mark.requirement("FR-011")
    def test_source_map_built_only_when_requested(self) -> None:
        """Test the builder is not invoked without a source map request."""
        builder = _Builder(_single_mapping_map())
        result = assemble(
            "a{}",
            builder,
            style=OutputStyle.EXPANDED,
            charset=True,
            source_map=False,
            loaded_urls=[],
        )
        assert result.source_map is None
        assert builder.built == 0

    @pytest.mark.requirement("FR-011")
    def test_source_map_shifted_by_declaration(self) -> None:
        """Test mappings move down past an @charset line."""
        result = assemble(
            "a { content: 'é' }",
            _Builder(_single_mapping_map()),
            style=OutputStyle.EXPANDED,
            charset=True,
            source_map=True,
            loaded_urls=[],
        )
        assert result.source_map is not None
        assert result.source_map.mappings[0].generated_line == 1

    @pytest.mark.requirement("FR-011")
    def test_target_url_left_unset(self) -> None:
        """Test the map never names the generated file."""
        result = assemble(
            "a{}",
            _Builder(_single_mapping_map(target_url="out.css")),
            style=OutputStyle.COMPRESSED,
            charset=True,
            source_map=True,
            loaded_urls=[],
        )
        assert result.source_map is not None
        assert result.source_map.target_url is None
        assert "sourceMappingURL" not in result.css

    @pytest.mark.requirement("FR-011")
    def test_missing_builder_logged(self) -> None:
        """Test a requested map without a builder logs a warning and yields None."""
        with structlog.testing.capture_logs() as logs:
            result = assemble(
                "a{}",
                None,
                style=OutputStyle.EXPANDED,
                charset=True,
                source_map=True,
                loaded_urls=[],
            )
        assert result.source_map is None
        assert any(log["event"] == "source_map_unavailable" for log in logs)

    @pytest.mark.requirement("FR-003")
    def test_loaded_urls_frozen(self) -> None:
        """Test loaded URLs become a frozenset."""
        result = assemble(
            "",
            None,
            style=OutputStyle.EXPANDED,
            charset=True,
            source_map=False,
            loaded_urls=["memory:a", "memory:b", "memory:a"],
        )
        assert result.loaded_urls == frozenset({"memory:a", "memory:b"})
