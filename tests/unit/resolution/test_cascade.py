"""Unit tests for the resolver cascade.

Covers priority order, short-circuiting on the first answer, base URL
handling, ambiguity, and misbehaving importers.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest

from sass_core.compilation.errors import AmbiguousImportError, ConfigurationError
from sass_core.effects import run_async, run_sync
from sass_core.importers.base import CallableImporter, ImporterResult
from sass_core.importers.package import PackageConfig
from sass_core.resolution.cascade import ResolverEntry, ResolverKind, ResolverSet


def _ambiguous(reference: str, base_url: str | None) -> ImporterResult | None:
    raise AmbiguousImportError(reference, ["memory:a1", "memory:a2"], base_url)


class TestResolverSetConstruction:
    """Tests for building the cascade."""

    @pytest.mark.requirement("FR-002")
    def test_priority_order(self, memory_importer: Any, tmp_path: Path) -> None:
        """Test explicit importers, load paths, SASS_PATH then packages."""
        importer = memory_importer({})
        resolvers = ResolverSet(
            importers=[importer],
            load_paths=[tmp_path / "lp"],
            environment_load_paths=[tmp_path / "env"],
            package_config=PackageConfig(),
        )
        assert [entry.kind for entry in resolvers] == [
            ResolverKind.EXPLICIT,
            ResolverKind.LOAD_PATH,
            ResolverKind.ENVIRONMENT,
            ResolverKind.PACKAGE,
        ]
        assert len(resolvers) == 4

    @pytest.mark.requirement("FR-002")
    def test_load_paths_keep_given_order(self) -> None:
        """Test load paths are tried in the order given."""
        resolvers = ResolverSet(load_paths=["b", "a", "c"], environment_load_paths=[])
        assert [entry.label for entry in resolvers] == [
            "load_path:b",
            "load_path:a",
            "load_path:c",
        ]

    @pytest.mark.requirement("FR-013")
    def test_environment_read_when_not_given(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test SASS_PATH supplies environment load paths by default."""
        monkeypatch.setenv("SASS_PATH", "shared")
        resolvers = ResolverSet()
        assert [entry.label for entry in resolvers] == ["environment:shared"]

    @pytest.mark.requirement("FR-013")
    def test_environment_disabled_by_empty_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an explicit empty list ignores SASS_PATH."""
        monkeypatch.setenv("SASS_PATH", "shared")
        assert len(ResolverSet(environment_load_paths=[])) == 0

    @pytest.mark.requirement("FR-014")
    def test_none_importer_rejected(self, memory_importer: Any) -> None:
        """Test a None entry in the importer list is a configuration error."""
        with pytest.raises(ConfigurationError) as exc_info:
            ResolverSet(importers=[memory_importer({}), None], environment_load_paths=[])
        assert exc_info.value.error.context == {"index": 1}

    @pytest.mark.requirement("FR-002")
    def test_empty_load_path_skipped(self) -> None:
        """Test empty strings are not turned into load paths."""
        assert len(ResolverSet(load_paths=[""], environment_load_paths=[])) == 0

    @pytest.mark.requirement("FR-001")
    def test_cascade_prepends_relative(self, memory_importer: Any) -> None:
        """Test the relative resolver comes first when given."""
        resolvers = ResolverSet(importers=[memory_importer({})], environment_load_paths=[])
        relative = ResolverEntry.relative_to(memory_importer({}, scheme="rel"))
        cascade = resolvers.cascade(relative)
        assert cascade[0] is relative
        assert list(cascade[1:]) == list(resolvers.entries)
        assert resolvers.cascade(None) == resolvers.entries


class TestResolveSteps:
    """Tests for walking the cascade."""

    @pytest.mark.requirement("FR-002")
    def test_first_answer_wins(self, memory_importer: Any) -> None:
        """Test later resolvers are not invoked once one answers."""
        first = memory_importer({"a.scss": "first"}, scheme="one")
        second = memory_importer({"a.scss": "second"}, scheme="two")
        resolvers = ResolverSet(importers=[first, second], environment_load_paths=[])

        answer = run_sync(resolvers.resolve_steps("a.scss", None, None))

        assert answer is not None
        entry, result = answer
        assert entry.importer is first
        assert result.contents == "first"
        assert second.calls == []

    @pytest.mark.requirement("FR-002")
    def test_declined_resolvers_fall_through(self, memory_importer: Any) -> None:
        """Test a declining resolver passes the reference on."""
        first = memory_importer({}, scheme="one")
        second = memory_importer({"a.scss": "second"}, scheme="two")
        resolvers = ResolverSet(importers=[first, second], environment_load_paths=[])

        answer = run_sync(resolvers.resolve_steps("a.scss", None, None))

        assert answer is not None
        assert answer[1].canonical_url == "two:a.scss"
        assert first.calls == [("a.scss", None)]

    @pytest.mark.requirement("FR-001")
    def test_only_relative_resolver_sees_base_url(self, memory_importer: Any) -> None:
        """Test secondary resolvers are called without the base URL."""
        relative_importer = memory_importer({}, scheme="rel")
        explicit = memory_importer({"a.scss": ""})
        resolvers = ResolverSet(importers=[explicit], environment_load_paths=[])

        run_sync(
            resolvers.resolve_steps(
                "a.scss", "rel:main.scss", ResolverEntry.relative_to(relative_importer)
            )
        )

        assert relative_importer.calls == [("a.scss", "rel:main.scss")]
        assert explicit.calls == [("a.scss", None)]

    @pytest.mark.requirement("FR-007")
    def test_exhausted_cascade_returns_none(self, memory_importer: Any) -> None:
        """Test None when every resolver declines."""
        resolvers = ResolverSet(importers=[memory_importer({})], environment_load_paths=[])
        assert run_sync(resolvers.resolve_steps("missing", None, None)) is None

    @pytest.mark.requirement("FR-009")
    def test_ambiguity_stops_the_cascade(self, memory_importer: Any) -> None:
        """Test later resolvers are not consulted after an ambiguity."""
        later = memory_importer({"a": ""})
        resolvers = ResolverSet(
            importers=[CallableImporter(_ambiguous), later],
            environment_load_paths=[],
        )
        with pytest.raises(AmbiguousImportError):
            run_sync(resolvers.resolve_steps("a", None, None))
        assert later.calls == []

    @pytest.mark.requirement("FR-014")
    def test_async_importer_in_sync_mode(self, async_memory_importer: Any) -> None:
        """Test an asynchronous importer is a configuration error when run synchronously."""
        resolvers = ResolverSet(
            importers=[async_memory_importer({"a.scss": ""})],
            environment_load_paths=[],
        )
        with pytest.raises(ConfigurationError, match="asynchronous"):
            run_sync(resolvers.resolve_steps("a.scss", None, None))

    @pytest.mark.requirement("FR-004")
    def test_async_importer_in_async_mode(self, async_memory_importer: Any) -> None:
        """Test an asynchronous importer is awaited by run_async."""
        resolvers = ResolverSet(
            importers=[async_memory_importer({"a.scss": "x"})],
            environment_load_paths=[],
        )
        answer = asyncio.run(run_async(resolvers.resolve_steps("a.scss", None, None)))
        assert answer is not None
        assert answer[1].contents == "x"

    @pytest.mark.requirement("FR-014")
    def test_wrong_return_type(self) -> None:
        """Test an importer returning something else is a configuration error."""
        resolvers = ResolverSet(
            importers=[CallableImporter(lambda ref, base: "a { }", name="bad")],
            environment_load_paths=[],
        )
        with pytest.raises(ConfigurationError, match="expected ImporterResult"):
            run_sync(resolvers.resolve_steps("a", None, None))

    @pytest.mark.requirement("FR-002")
    def test_entry_kinds_mark_dependencies(self, memory_importer: Any) -> None:
        """Test only the entry-relative resolver loads non-dependencies."""
        assert not ResolverEntry.relative_to(memory_importer({})).loads_dependencies
        resolvers = ResolverSet(
            importers=[memory_importer({})], load_paths=["x"], environment_load_paths=[]
        )
        assert all(entry.loads_dependencies for entry in resolvers)
