"""Shared fixtures for sass-core unit tests.

Provides a small fake toolchain so compilation can be exercised without a
real Sass implementation. Its language is line based:

    @use "ref";          load another stylesheet and inline it (once)
    @deprecated kind;    report a deprecation of ``kind``
    @warn "message";     report a warning
    @debug "message";    report a debug message
    @error "message";    fail evaluation
    @call name;          emit the result of custom function ``name``
    !!!                  syntax error
    anything else        a CSS line, copied to the output
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from sass_core.compilation.assembler import OutputStyle
from sass_core.compilation.errors import SourceSpan
from sass_core.importers.base import ImporterResult
from sass_core.source_map import Mapping, SourceMap
from sass_core.syntax import Syntax
from sass_core.toolchain import Toolchain

_USE = re.compile(r'^@(?:use|import)\s+"([^"]+)";$')
_MESSAGE = re.compile(r'^@(warn|debug|error)\s+"([^"]*)";$')
_NAMED = re.compile(r"^@(deprecated|call)\s+([\w-]+);$")


class FakeSyntaxError(Exception):
    """Parser failure carrying a location."""

    def __init__(self, message: str, line: int, column: int = 0) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class FakeEvaluationError(Exception):
    """Evaluator failure carrying a location."""

    def __init__(self, message: str, url: str | None, line: int) -> None:
        super().__init__(message)
        self.url = url
        self.line = line


@dataclass(frozen=True)
class Statement:
    kind: str
    value: str
    line: int


@dataclass(frozen=True)
class FakeStylesheet:
    url: str | None
    syntax: Syntax
    statements: tuple[Statement, ...]


@dataclass(frozen=True)
class Rule:
    text: str
    url: str | None
    line: int


class FakeParser:
    """Parses the line-based fake language, recording every parsed URL."""

    def __init__(self) -> None:
        self.parsed: list[str | None] = []

    def parse(self, text: str, syntax: Syntax, url: str | None) -> FakeStylesheet:
        self.parsed.append(url)
        statements: list[Statement] = []
        for number, raw in enumerate(text.splitlines()):
            line = raw.strip()
            if not line:
                continue
            if line == "!!!":
                raise FakeSyntaxError("expected selector", number, raw.index("!"))
            if match := _USE.match(line):
                statements.append(Statement("use", match.group(1), number))
            elif match := _MESSAGE.match(line):
                statements.append(Statement(match.group(1), match.group(2), number))
            elif match := _NAMED.match(line):
                statements.append(Statement(match.group(1), match.group(2), number))
            else:
                statements.append(Statement("css", line, number))
        return FakeStylesheet(url, syntax, tuple(statements))


def _apply(statement: Statement, sheet: FakeStylesheet, context: Any, rules: list[Rule]) -> None:
    span = SourceSpan(url=sheet.url, line=statement.line)
    if statement.kind == "css":
        rules.append(Rule(statement.value, sheet.url, statement.line))
    elif statement.kind == "deprecated":
        context.warn(
            f"{statement.value} is deprecated",
            deprecation=statement.value,
            span=span,
            origin_url=sheet.url,
        )
    elif statement.kind == "warn":
        context.warn(statement.value, span=span, origin_url=sheet.url)
    elif statement.kind == "debug":
        context.debug(statement.value, span=span)
    elif statement.kind == "call":
        rules.append(Rule(str(context.functions[statement.value]()), sheet.url, statement.line))
    elif statement.kind == "error":
        raise FakeEvaluationError(statement.value, sheet.url, statement.line)


class FakeEvaluator:
    """Synchronous evaluator: inlines each stylesheet the first time it is used."""

    def evaluate(self, stylesheet: FakeStylesheet, context: Any) -> list[Rule]:
        rules: list[Rule] = []
        self._walk(stylesheet, context, rules, set())
        return rules

    def _walk(
        self, sheet: FakeStylesheet, context: Any, rules: list[Rule], seen: set[str | None]
    ) -> None:
        seen.add(sheet.url)
        for statement in sheet.statements:
            if statement.kind != "use":
                _apply(statement, sheet, context, rules)
                continue
            imported = context.load_import(statement.value, sheet.url)
            if imported.canonical_url not in seen:
                self._walk(imported.stylesheet, context, rules, seen)


class FakeAsyncEvaluator:
    """Asynchronous twin of FakeEvaluator."""

    async def evaluate(self, stylesheet: FakeStylesheet, context: Any) -> list[Rule]:
        rules: list[Rule] = []
        await self._walk(stylesheet, context, rules, set())
        return rules

    async def _walk(
        self, sheet: FakeStylesheet, context: Any, rules: list[Rule], seen: set[str | None]
    ) -> None:
        seen.add(sheet.url)
        for statement in sheet.statements:
            if statement.kind != "use":
                _apply(statement, sheet, context, rules)
                continue
            imported = await context.load_import(statement.value, sheet.url)
            if imported.canonical_url not in seen:
                await self._walk(imported.stylesheet, context, rules, seen)


class FakeSourceMapBuilder:
    """Builds a source map from (line, column, rule) entries."""

    def __init__(self, entries: list[tuple[int, int, Rule]]) -> None:
        self.entries = entries

    def build(self) -> SourceMap:
        sources: list[str] = []
        mappings: list[Mapping] = []
        for line, column, rule in self.entries:
            url = rule.url or "stdin:"
            if url not in sources:
                sources.append(url)
            mappings.append(
                Mapping(
                    generated_line=line,
                    generated_column=column,
                    source_index=sources.index(url),
                    original_line=rule.line,
                )
            )
        return SourceMap(sources=sources, mappings=mappings)


class FakeSerializer:
    """One rule per line when expanded; rules concatenated without spaces when compressed."""

    def render(self, tree: list[Rule], style: OutputStyle) -> tuple[str, FakeSourceMapBuilder]:
        entries: list[tuple[int, int, Rule]] = []
        if style is OutputStyle.COMPRESSED:
            parts: list[str] = []
            column = 0
            for rule in tree:
                text = rule.text.replace(" ", "")
                entries.append((0, column, rule))
                parts.append(text)
                column += len(text)
            return "".join(parts), FakeSourceMapBuilder(entries)
        entries = [(index, 0, rule) for index, rule in enumerate(tree)]
        return "\n".join(rule.text for rule in tree), FakeSourceMapBuilder(entries)


class MemoryImporter:
    """Importer over an in-memory dict, recording every call."""

    def __init__(self, files: dict[str, str], scheme: str = "memory") -> None:
        self.files = dict(files)
        self.scheme = scheme
        self.calls: list[tuple[str, str | None]] = []

    def resolve(self, reference: str, base_url: str | None) -> ImporterResult | None:
        self.calls.append((reference, base_url))
        name = reference.removeprefix(f"{self.scheme}:")
        if name not in self.files:
            return None
        return ImporterResult(
            canonical_url=f"{self.scheme}:{name}",
            contents=self.files[name],
            syntax=Syntax.for_path(name),
        )

    def __repr__(self) -> str:
        return f"MemoryImporter({self.scheme!r})"


class AsyncMemoryImporter(MemoryImporter):
    """MemoryImporter whose resolve suspends before answering."""

    async def resolve(  # type: ignore[override]
        self, reference: str, base_url: str | None
    ) -> ImporterResult | None:
        await asyncio.sleep(0)
        return super().resolve(reference, base_url)


@dataclass(frozen=True)
class Diagnostic:
    message: str
    span: SourceSpan | None
    deprecation: bool = False


@dataclass
class RecordingLogger:
    """Logger keeping every diagnostic it receives."""

    warnings: list[Diagnostic] = field(default_factory=list)
    debugs: list[Diagnostic] = field(default_factory=list)

    def warn(
        self,
        message: str,
        *,
        span: SourceSpan | None = None,
        deprecation: bool = False,
    ) -> None:
        self.warnings.append(Diagnostic(message, span, deprecation))

    def debug(self, message: str, span: SourceSpan | None = None) -> None:
        self.debugs.append(Diagnostic(message, span))

    @property
    def deprecations(self) -> list[Diagnostic]:
        return [warning for warning in self.warnings if warning.deprecation]


@pytest.fixture
def parser() -> FakeParser:
    """Fake parser shared by the toolchain fixtures."""
    return FakeParser()


@pytest.fixture
def toolchain(parser: FakeParser) -> Toolchain:
    """Toolchain with a synchronous evaluator."""
    return Toolchain(
        parser=parser,
        evaluator=FakeEvaluator(),
        serializer=FakeSerializer(),
        name="fake",
    )


@pytest.fixture
def async_toolchain(parser: FakeParser) -> Toolchain:
    """Toolchain with an asynchronous evaluator."""
    return Toolchain(
        parser=parser,
        evaluator=FakeAsyncEvaluator(),
        serializer=FakeSerializer(),
        name="fake-async",
    )


@pytest.fixture
def recording_logger() -> RecordingLogger:
    """Logger that records diagnostics for assertions."""
    return RecordingLogger()


@pytest.fixture
def memory_importer() -> type[MemoryImporter]:
    """Factory for in-memory importers: ``memory_importer({"a.scss": "..."})``."""
    return MemoryImporter


@pytest.fixture
def async_memory_importer() -> type[AsyncMemoryImporter]:
    """Factory for in-memory importers whose resolve is a coroutine."""
    return AsyncMemoryImporter


@pytest.fixture
def write_stylesheet(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a stylesheet under ``tmp_path`` and return its path."""

    def _write(relative: str, contents: str = "") -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(contents, encoding="utf-8")
        return path

    return _write
