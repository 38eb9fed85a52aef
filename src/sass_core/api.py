"""Public compile functions.

Four functions return a ``CompileResult``:

- ``compile_to_result`` / ``compile_to_result_async`` compile a file.
- ``compile_string_to_result`` / ``compile_string_to_result_async`` compile
  an in-memory source.

The older ``compile``, ``compile_string``, ``compile_async`` and
``compile_string_async`` return only the CSS text and hand the source map to
a callback. They still work but emit a ``DeprecationWarning``.

Example:
    >>> result = compile_to_result("styles/main.scss", load_paths=["node_modules"])
    >>> result.css
    'a {\\n  color: red;\\n}'

    >>> result = compile_string_to_result(
    ...     ".a { b: c }",
    ...     style=OutputStyle.COMPRESSED,
    ...     source_map=True,
    ... )
"""

from __future__ import annotations

import warnings
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from sass_core.compilation.assembler import OutputStyle
from sass_core.compilation.errors import ConfigurationError
from sass_core.compilation.orchestrator import compile_request, compile_request_async
from sass_core.compilation.request import CompilationRequest
from sass_core.compilation.result import CompileResult
from sass_core.diagnostics.logger import Logger, StderrLogger
from sass_core.importers.base import AnyImporter
from sass_core.importers.package import PackageConfig
from sass_core.resolution.import_cache import BaseImportCache
from sass_core.source_map import SourceMap
from sass_core.syntax import Syntax
from sass_core.toolchain import Toolchain

SourceMapCallback = Callable[[SourceMap], None]


def _request(
    *,
    load_paths: Iterable[str | Path],
    importers: Iterable[AnyImporter],
    package_config: PackageConfig | None,
    environment_load_paths: Iterable[str | Path] | None,
    functions: Mapping[str, Callable[..., Any]] | None,
    style: OutputStyle | str,
    quiet_deps: bool,
    verbose: bool,
    source_map: bool,
    charset: bool,
    **entry: Any,
) -> CompilationRequest:
    return CompilationRequest.from_options(
        **entry,
        importers=tuple(importers),
        load_paths=tuple(load_paths),
        environment_load_paths=(
            tuple(environment_load_paths) if environment_load_paths is not None else None
        ),
        package_config=package_config,
        functions=dict(functions or {}),
        style=style,
        quiet_deps=quiet_deps,
        verbose=verbose,
        source_map=source_map,
        charset=charset,
    )


def _diagnostics(logger: Logger | None, color: bool) -> Logger:
    return logger if logger is not None else StderrLogger(color=color)


def _syntax_hint(syntax: Syntax | str | None, indented: bool) -> Syntax | None:
    if syntax is None and not indented:
        return None
    try:
        return Syntax.from_hint(syntax, indented=indented)
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown syntax: {syntax!r}",
            suggestion=f"Use one of: {', '.join(s.value for s in Syntax)}",
        ) from e


def compile_to_result(
    path: str | Path,
    *,
    load_paths: Iterable[str | Path] = (),
    importers: Iterable[AnyImporter] = (),
    package_config: PackageConfig | None = None,
    environment_load_paths: Iterable[str | Path] | None = None,
    functions: Mapping[str, Callable[..., Any]] | None = None,
    style: OutputStyle | str = OutputStyle.EXPANDED,
    quiet_deps: bool = False,
    verbose: bool = False,
    source_map: bool = False,
    charset: bool = True,
    color: bool = False,
    logger: Logger | None = None,
    toolchain: Toolchain | None = None,
    import_cache: BaseImportCache | None = None,
) -> CompileResult:
    """Compile the stylesheet at ``path``.

    Imports resolve relative to the importing file first, then through
    ``importers``, ``load_paths``, ``SASS_PATH`` and finally
    ``package_config``.

    Args:
        path: Entry stylesheet.
        load_paths: Directories searched for imports, in order.
        importers: Importers consulted before the load paths, in order.
        package_config: Configuration for ``package:`` URLs.
        environment_load_paths: Overrides ``SASS_PATH``; None reads it.
        functions: Custom functions for the evaluator, keyed by signature.
        style: Output style.
        quiet_deps: Silence warnings from dependencies.
        verbose: Report every deprecation instead of the first five per kind.
        source_map: Produce a source map.
        charset: Emit a charset marker when the CSS is not ASCII.
        color: Use terminal colors in the default logger.
        logger: Diagnostic logger; a ``StderrLogger`` by default.
        toolchain: Parser, evaluator and serializer; discovered if None.
        import_cache: Cache to reuse across compiles.

    Returns:
        The compilation result.

    Raises:
        SassException: If compilation fails.
    """
    request = _request(
        path=Path(path),
        load_paths=load_paths,
        importers=importers,
        package_config=package_config,
        environment_load_paths=environment_load_paths,
        functions=functions,
        style=style,
        quiet_deps=quiet_deps,
        verbose=verbose,
        source_map=source_map,
        charset=charset,
    )
    return compile_request(
        request,
        toolchain,
        import_cache=import_cache,
        logger=_diagnostics(logger, color),
    )


def compile_string_to_result(
    source: str,
    *,
    syntax: Syntax | str | None = None,
    url: str | None = None,
    importer: AnyImporter | None = None,
    load_paths: Iterable[str | Path] = (),
    importers: Iterable[AnyImporter] = (),
    package_config: PackageConfig | None = None,
    environment_load_paths: Iterable[str | Path] | None = None,
    functions: Mapping[str, Callable[..., Any]] | None = None,
    style: OutputStyle | str = OutputStyle.EXPANDED,
    quiet_deps: bool = False,
    verbose: bool = False,
    source_map: bool = False,
    charset: bool = True,
    color: bool = False,
    logger: Logger | None = None,
    toolchain: Toolchain | None = None,
    import_cache: BaseImportCache | None = None,
) -> CompileResult:
    """Compile an in-memory stylesheet.

    Args:
        source: Stylesheet text.
        syntax: Syntax of ``source``; inferred from ``url`` or SCSS if None.
        url: Canonical URL of ``source``; used for relative imports and
            reported in ``loaded_urls``.
        importer: Importer for relative imports from ``source``; requires
            ``url``. Defaults to the current directory.

    The remaining arguments are as for ``compile_to_result``.

    Returns:
        The compilation result.

    Raises:
        SassException: If compilation fails.
    """
    request = _request(
        source=source,
        syntax=syntax,
        url=url,
        importer=importer,
        load_paths=load_paths,
        importers=importers,
        package_config=package_config,
        environment_load_paths=environment_load_paths,
        functions=functions,
        style=style,
        quiet_deps=quiet_deps,
        verbose=verbose,
        source_map=source_map,
        charset=charset,
    )
    return compile_request(
        request,
        toolchain,
        import_cache=import_cache,
        logger=_diagnostics(logger, color),
    )


async def compile_to_result_async(
    path: str | Path,
    *,
    load_paths: Iterable[str | Path] = (),
    importers: Iterable[AnyImporter] = (),
    package_config: PackageConfig | None = None,
    environment_load_paths: Iterable[str | Path] | None = None,
    functions: Mapping[str, Callable[..., Any]] | None = None,
    style: OutputStyle | str = OutputStyle.EXPANDED,
    quiet_deps: bool = False,
    verbose: bool = False,
    source_map: bool = False,
    charset: bool = True,
    color: bool = False,
    logger: Logger | None = None,
    toolchain: Toolchain | None = None,
    import_cache: BaseImportCache | None = None,
) -> CompileResult:
    """Like ``compile_to_result``, but importers and the evaluator may suspend.

    Only use this when you need asynchronous importers: the synchronous
    function produces identical output and is faster.
    """
    request = _request(
        path=Path(path),
        load_paths=load_paths,
        importers=importers,
        package_config=package_config,
        environment_load_paths=environment_load_paths,
        functions=functions,
        style=style,
        quiet_deps=quiet_deps,
        verbose=verbose,
        source_map=source_map,
        charset=charset,
    )
    return await compile_request_async(
        request,
        toolchain,
        import_cache=import_cache,
        logger=_diagnostics(logger, color),
    )


async def compile_string_to_result_async(
    source: str,
    *,
    syntax: Syntax | str | None = None,
    url: str | None = None,
    importer: AnyImporter | None = None,
    load_paths: Iterable[str | Path] = (),
    importers: Iterable[AnyImporter] = (),
    package_config: PackageConfig | None = None,
    environment_load_paths: Iterable[str | Path] | None = None,
    functions: Mapping[str, Callable[..., Any]] | None = None,
    style: OutputStyle | str = OutputStyle.EXPANDED,
    quiet_deps: bool = False,
    verbose: bool = False,
    source_map: bool = False,
    charset: bool = True,
    color: bool = False,
    logger: Logger | None = None,
    toolchain: Toolchain | None = None,
    import_cache: BaseImportCache | None = None,
) -> CompileResult:
    """Like ``compile_string_to_result``, but importers and the evaluator may suspend."""
    request = _request(
        source=source,
        syntax=syntax,
        url=url,
        importer=importer,
        load_paths=load_paths,
        importers=importers,
        package_config=package_config,
        environment_load_paths=environment_load_paths,
        functions=functions,
        style=style,
        quiet_deps=quiet_deps,
        verbose=verbose,
        source_map=source_map,
        charset=charset,
    )
    return await compile_request_async(
        request,
        toolchain,
        import_cache=import_cache,
        logger=_diagnostics(logger, color),
    )


def _warn_deprecated(name: str, replacement: str) -> None:
    warnings.warn(
        f"{name}() is deprecated and will be removed; use {replacement}() instead",
        DeprecationWarning,
        stacklevel=3,
    )


def _deliver(result: CompileResult, source_map: SourceMapCallback | None) -> str:
    if source_map is not None and result.source_map is not None:
        source_map(result.source_map)
    return result.css


def compile(  # noqa: A001
    path: str | Path,
    *,
    source_map: SourceMapCallback | None = None,
    **options: Any,
) -> str:
    """Compile the file at ``path`` to CSS text.

    Deprecated: use ``compile_to_result``.

    Args:
        path: Entry stylesheet.
        source_map: Called with the source map; passing it enables source maps.
        **options: Keyword arguments of ``compile_to_result``.

    Returns:
        The compiled CSS.
    """
    _warn_deprecated("compile", "compile_to_result")
    result = compile_to_result(path, source_map=source_map is not None, **options)
    return _deliver(result, source_map)


def compile_string(
    source: str,
    *,
    indented: bool = False,
    syntax: Syntax | str | None = None,
    source_map: SourceMapCallback | None = None,
    **options: Any,
) -> str:
    """Compile ``source`` to CSS text.

    Deprecated: use ``compile_string_to_result``.

    Args:
        source: Stylesheet text.
        indented: Parse as the indented syntax when ``syntax`` is not given.
        syntax: Syntax of ``source``.
        source_map: Called with the source map; passing it enables source maps.
        **options: Keyword arguments of ``compile_string_to_result``.

    Returns:
        The compiled CSS.
    """
    _warn_deprecated("compile_string", "compile_string_to_result")
    result = compile_string_to_result(
        source,
        syntax=_syntax_hint(syntax, indented),
        source_map=source_map is not None,
        **options,
    )
    return _deliver(result, source_map)


async def compile_async(
    path: str | Path,
    *,
    source_map: SourceMapCallback | None = None,
    **options: Any,
) -> str:
    """Asynchronous ``compile``. Deprecated: use ``compile_to_result_async``."""
    _warn_deprecated("compile_async", "compile_to_result_async")
    result = await compile_to_result_async(path, source_map=source_map is not None, **options)
    return _deliver(result, source_map)


async def compile_string_async(
    source: str,
    *,
    indented: bool = False,
    syntax: Syntax | str | None = None,
    source_map: SourceMapCallback | None = None,
    **options: Any,
) -> str:
    """Asynchronous ``compile_string``. Deprecated: use ``compile_string_to_result_async``."""
    _warn_deprecated("compile_string_async", "compile_string_to_result_async")
    result = await compile_string_to_result_async(
        source,
        syntax=_syntax_hint(syntax, indented),
        source_map=source_map is not None,
        **options,
    )
    return _deliver(result, source_map)


__all__ = [
    "compile",
    "compile_async",
    "compile_string",
    "compile_string_async",
    "compile_string_to_result",
    "compile_string_to_result_async",
    "compile_to_result",
    "compile_to_result_async",
]
