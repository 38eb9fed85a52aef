"""Unit tests for source map encoding and prefix shifting."""

from __future__ import annotations

import json

import pytest

from sass_core.compilation.assembler import BYTE_ORDER_MARK, CHARSET_DECLARATION
from sass_core.source_map import Mapping, SourceMap, encode_vlq


def _map(*mappings: Mapping) -> SourceMap:
    return SourceMap(sources=["file:///app/main.scss"], mappings=list(mappings))


class TestEncodeVlq:
    """Tests for base64 VLQ encoding."""

    @pytest.mark.requirement("FR-011")
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0, "A"), (1, "C"), (-1, "D"), (2, "E"), (15, "e"), (16, "gB"), (-16, "hB")],
    )
    def test_known_values(self, value: int, expected: str) -> None:
        """Test encoding against known VLQ values."""
        assert encode_vlq(value) == expected


class TestEncodedMappings:
    """Tests for the v3 mappings string."""

    @pytest.mark.requirement("FR-011")
    def test_empty(self) -> None:
        """Test a map without mappings encodes as an empty string."""
        assert _map().encoded_mappings() == ""

    @pytest.mark.requirement("FR-011")
    def test_segments_on_one_line_are_relative(self) -> None:
        """Test columns and original lines are deltas within a line."""
        source_map = _map(
            Mapping(generated_line=0, generated_column=0),
            Mapping(generated_line=0, generated_column=4, original_line=1),
        )
        assert source_map.encoded_mappings() == "AAAA,IACA"

    @pytest.mark.requirement("FR-011")
    def test_column_resets_on_new_line(self) -> None:
        """Test the generated column delta restarts on each line."""
        source_map = _map(
            Mapping(generated_line=0, generated_column=0),
            Mapping(generated_line=1, generated_column=0, original_line=1),
        )
        assert source_map.encoded_mappings() == "AAAA;AACA"

    @pytest.mark.requirement("FR-011")
    def test_empty_lines_are_kept(self) -> None:
        """Test lines without mappings still get a separator."""
        source_map = _map(Mapping(generated_line=2, generated_column=0))
        assert source_map.encoded_mappings() == ";;AAAA"

    @pytest.mark.requirement("FR-011")
    def test_unsorted_mappings_are_sorted(self) -> None:
        """Test encoding orders mappings by generated position."""
        ordered = _map(
            Mapping(generated_line=0, generated_column=0),
            Mapping(generated_line=1, generated_column=2, original_line=3),
        )
        shuffled = _map(*reversed(ordered.mappings))
        assert shuffled.encoded_mappings() == ordered.encoded_mappings()


class TestWithPrefix:
    """Tests for shifting mappings past prepended text."""

    @pytest.mark.requirement("FR-006")
    def test_charset_declaration_shifts_one_line(self) -> None:
        """Test an @charset line moves every mapping down one line."""
        shifted = _map(
            Mapping(generated_line=0, generated_column=3),
            Mapping(generated_line=2, generated_column=1),
        ).with_prefix(CHARSET_DECLARATION)
        assert [(m.generated_line, m.generated_column) for m in shifted.mappings] == [
            (1, 3),
            (3, 1),
        ]

    @pytest.mark.requirement("FR-006")
    def test_byte_order_mark_occupies_no_column(self) -> None:
        """Test a BOM leaves mappings untouched."""
        original = _map(Mapping(generated_line=0, generated_column=5))
        assert original.with_prefix(BYTE_ORDER_MARK) == original

    @pytest.mark.requirement("FR-011")
    def test_text_without_newline_shifts_first_line_columns(self) -> None:
        """Test same-line prefix text shifts only first-line columns."""
        shifted = _map(
            Mapping(generated_line=0, generated_column=1),
            Mapping(generated_line=1, generated_column=1),
        ).with_prefix("ab")
        assert [(m.generated_line, m.generated_column) for m in shifted.mappings] == [
            (0, 3),
            (1, 1),
        ]


class TestToDict:
    """Tests for the v3 JSON structure."""

    @pytest.mark.requirement("FR-011")
    def test_minimal_structure(self) -> None:
        """Test required v3 keys are present and optional ones omitted."""
        data = _map(Mapping(generated_line=0, generated_column=0, original_line=2)).to_dict()
        assert data == {
            "version": 3,
            "sources": ["file:///app/main.scss"],
            "names": [],
            "mappings": "AAEA",
        }

    @pytest.mark.requirement("FR-011")
    def test_optional_fields(self) -> None:
        """Test file and sourcesContent are emitted when set."""
        source_map = SourceMap(
            sources=["memory:a.scss"],
            sources_content=["a { b: c }"],
            target_url="out.css",
        )
        data = json.loads(source_map.to_json())
        assert data["file"] == "out.css"
        assert data["sourcesContent"] == ["a { b: c }"]

    @pytest.mark.requirement("FR-011")
    def test_names_are_encoded(self) -> None:
        """Test a mapping with a name index gets a fifth field."""
        source_map = SourceMap(
            sources=["memory:a.scss"],
            names=["color"],
            mappings=[Mapping(generated_line=0, generated_column=0, name_index=0)],
        )
        assert source_map.to_dict()["mappings"] == "AAAAA"
