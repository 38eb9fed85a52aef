"""Parser, evaluator and serializer protocols, and toolchain discovery.

The compiler core orchestrates a compilation but does not itself parse,
evaluate or render stylesheets. Those jobs belong to a ``Toolchain``:

- ``Parser.parse(text, syntax, url)`` returns a parsed stylesheet.
- ``Evaluator.evaluate(stylesheet, context)`` walks it, loading imports and
  reporting diagnostics through the ``CompilationContext``.
- ``Serializer.render(tree, style)`` renders CSS plus an optional
  source-map builder.

Toolchains are published by installed packages under the
``sass_core.toolchains`` entry-point group. Each entry point loads either a
``Toolchain`` or a zero-argument callable returning one.

Example (in the providing package's pyproject.toml):
    [project.entry-points."sass_core.toolchains"]
    dart = "dart_sass_bridge:toolchain"
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib.metadata import EntryPoint, entry_points
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import structlog

from sass_core.compilation.errors import ConfigurationError
from sass_core.syntax import Syntax

if TYPE_CHECKING:
    from sass_core.compilation.assembler import OutputStyle
    from sass_core.compilation.context import AsyncCompilationContext, CompilationContext
    from sass_core.source_map import SourceMapBuilder

logger = structlog.get_logger(__name__)

TOOLCHAIN_ENTRY_POINT_GROUP = "sass_core.toolchains"


@runtime_checkable
class Parser(Protocol):
    """Turns stylesheet text into a parsed form."""

    def parse(self, text: str, syntax: Syntax, url: str | None) -> Any:
        """Parse ``text``.

        Raises:
            Exception: On syntax errors. Exceptions exposing ``line`` and
                ``column`` attributes keep their location when wrapped.
        """
        ...


@runtime_checkable
class Evaluator(Protocol):
    """Evaluates a parsed stylesheet synchronously."""

    def evaluate(self, stylesheet: Any, context: CompilationContext) -> Any:
        """Evaluate ``stylesheet`` and return the evaluated tree."""
        ...


@runtime_checkable
class AsyncEvaluator(Protocol):
    """Evaluates a parsed stylesheet, awaiting import resolution."""

    async def evaluate(self, stylesheet: Any, context: AsyncCompilationContext) -> Any:
        """Evaluate ``stylesheet`` and return the evaluated tree."""
        ...


@runtime_checkable
class Serializer(Protocol):
    """Renders an evaluated tree to CSS."""

    def render(self, tree: Any, style: OutputStyle) -> tuple[str, SourceMapBuilder | None]:
        """Render ``tree`` in ``style``.

        Returns:
            The CSS text and a source-map builder (None if not tracked).
        """
        ...


@dataclass(frozen=True)
class Toolchain:
    """Bundle of the external collaborators used by one compilation.

    Attributes:
        parser: Stylesheet parser.
        evaluator: Evaluator; an ``AsyncEvaluator`` only works with the
            asynchronous compile functions.
        serializer: CSS serializer.
        name: Label for logs.
    """

    parser: Parser
    evaluator: Evaluator | AsyncEvaluator
    serializer: Serializer
    name: str = "default"


def _load_entry_point(ep: EntryPoint) -> Toolchain:
    loaded = ep.load()
    toolchain = loaded if isinstance(loaded, Toolchain) else loaded()
    if not isinstance(toolchain, Toolchain):
        raise TypeError(
            f"Entry point {ep.name!r} produced {type(toolchain).__name__}, expected Toolchain"
        )
    return toolchain


def discover_toolchain(name: str | None = None) -> Toolchain:
    """Load a toolchain from the ``sass_core.toolchains`` entry points.

    Args:
        name: Entry point name to load; None picks the first by name.

    Returns:
        The loaded toolchain.

    Raises:
        ConfigurationError: If no usable toolchain is installed.
    """
    eps = sorted(entry_points(group=TOOLCHAIN_ENTRY_POINT_GROUP), key=lambda ep: ep.name)
    if name is not None:
        eps = [ep for ep in eps if ep.name == name]

    for ep in eps:
        try:
            toolchain = _load_entry_point(ep)
        except Exception as e:
            # Graceful degradation: log and try the next entry point
            logger.error(
                "toolchain_load_failed",
                entry_point=ep.name,
                value=ep.value,
                error=str(e),
            )
            continue
        logger.debug("toolchain_loaded", entry_point=ep.name, toolchain=toolchain.name)
        return toolchain

    raise ConfigurationError(
        f"No Sass toolchain installed{f' named {name!r}' if name else ''}",
        suggestion=(
            f"Install a package providing a '{TOOLCHAIN_ENTRY_POINT_GROUP}' entry point, "
            "or pass toolchain= explicitly"
        ),
        context={"group": TOOLCHAIN_ENTRY_POINT_GROUP, "name": name},
    )


__all__ = [
    "AsyncEvaluator",
    "Evaluator",
    "Parser",
    "Serializer",
    "TOOLCHAIN_ENTRY_POINT_GROUP",
    "Toolchain",
    "discover_toolchain",
]
