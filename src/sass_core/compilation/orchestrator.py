"""Compilation orchestrator.

One compilation run is a state machine:

    START -> RESOLVE_ENTRY -> EVALUATE -> ASSEMBLE -> DONE
                  \\               \\            \\
                   +---------------+------------+--> FAILED

The machine is written once, as the ``compile_steps`` generator. Every call
into a collaborator (importers, parser, evaluator, serializer) is yielded as
an effect:

- ``compile_request`` drives it with ``run_sync``: nothing suspends, and an
  asynchronous importer or evaluator is a configuration error.
- ``compile_request_async`` drives it with ``run_async``: effects that
  return awaitables are awaited. A synchronous evaluator still gets a
  synchronous context, so asynchronous importers need an asynchronous
  evaluator.

Because both drivers run the same generator, the two modes make the same
decisions in the same order and produce identical results.

Each stage runs in an OpenTelemetry span named ``compile.<stage>`` and logs
``compilation_stage_start`` / ``compilation_stage_complete``. A failed run
logs ``compilation_failed`` and raises; it never returns a partial result.

Example:
    >>> request = CompilationRequest.from_options(path=Path("main.scss"))
    >>> result = compile_request(request, toolchain=toolchain)
    >>> sorted(result.loaded_urls)
    ['file:///project/_colors.scss', 'file:///project/main.scss']
"""

from __future__ import annotations

import inspect
import time
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any

import structlog

from sass_core.compilation.assembler import assemble
from sass_core.compilation.context import (
    AsyncCompilationContext,
    BaseCompilationContext,
    CompilationContext,
)
from sass_core.compilation.errors import (
    AmbiguousImportError,
    ConfigurationError,
    EvaluationError,
    ImportNotFoundError,
    SassException,
    SourceSpan,
)
from sass_core.compilation.request import CompilationRequest
from sass_core.compilation.result import CompileResult
from sass_core.compilation.stages import CompilationStage
from sass_core.diagnostics.logger import Logger, StderrLogger
from sass_core.diagnostics.throttle import DeprecationThrottle
from sass_core.effects import AwaitableInSyncModeError, Call, Steps, run_async, run_sync
from sass_core.importers.filesystem import FilesystemImporter
from sass_core.resolution.import_cache import (
    AsyncImportCache,
    BaseImportCache,
    ImportCache,
    ImportedStylesheet,
)
from sass_core.telemetry.tracing import create_span
from sass_core.toolchain import Toolchain, discover_toolchain

logger = structlog.get_logger(__name__)


class ExecutionMode(str, Enum):
    """How effects are executed."""

    SYNC = "sync"
    ASYNC = "async"


@contextmanager
def _stage(stage: CompilationStage, log: Any, **attributes: Any) -> Iterator[None]:
    """Run one stage inside its span, logging start and completion."""
    log.debug("compilation_stage_start", stage=stage.value)
    start = time.perf_counter()
    span_attributes = {f"sass.{key}": value for key, value in attributes.items()}
    with create_span(f"compile.{stage.value.lower()}", attributes=span_attributes):
        yield
    log.debug(
        "compilation_stage_complete",
        stage=stage.value,
        duration_ms=round((time.perf_counter() - start) * 1000, 2),
    )


def _is_async_callable(fn: Any) -> bool:
    return inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(
        getattr(fn, "__call__", None)
    )


def _build_cache(
    request: CompilationRequest,
    mode: ExecutionMode,
    import_cache: BaseImportCache | None,
) -> BaseImportCache:
    if import_cache is not None:
        if mode is ExecutionMode.SYNC and isinstance(import_cache, AsyncImportCache):
            raise ConfigurationError(
                "An AsyncImportCache cannot be used by a synchronous compile",
                suggestion="Pass an ImportCache, or use the asynchronous compile functions",
            )
        return import_cache
    cache_cls = ImportCache if mode is ExecutionMode.SYNC else AsyncImportCache
    return cache_cls(request.resolver_set(), entry_importer=FilesystemImporter("."))


def _entry_steps(
    request: CompilationRequest,
    context: BaseCompilationContext,
) -> Steps[ImportedStylesheet]:
    """Resolve and parse the entry point."""
    if request.path is not None:
        return (yield from context.import_steps(str(request.path), None))

    seeded = context.cache.seed(
        request.entry_url,
        request.source or "",
        request.entry_syntax,
        importer=request.importer,
    )
    if request.url is not None:
        context.record_loaded(seeded.canonical_url)
    return (yield from context.cache.parse_steps(seeded, context.parser))


def compile_steps(
    request: CompilationRequest,
    toolchain: Toolchain | None = None,
    *,
    mode: ExecutionMode = ExecutionMode.SYNC,
    import_cache: BaseImportCache | None = None,
    logger: Logger | None = None,
    throttle: DeprecationThrottle | None = None,
) -> Steps[CompileResult]:
    """The compilation state machine, as a generator of effects.

    Args:
        request: What to compile.
        toolchain: Parser, evaluator and serializer; discovered from entry
            points if None.
        mode: Execution mode of the driver that will run the steps.
        import_cache: Cache to reuse across runs; a fresh one by default. A
            supplied cache brings its own resolvers, which replace those
            described by the request.
        logger: Receiver of diagnostics; ``StderrLogger`` by default.
        throttle: Deprecation throttle to share across runs; a fresh one
            bound to ``logger`` by default.

    Returns:
        The compilation result.

    Raises:
        SassException: On any fatal failure, tagged with its stage.
    """
    log = _logger_for(request, mode)
    stage = CompilationStage.START
    started = time.perf_counter()
    try:
        with _stage(stage, log, mode=mode.value, entry=request.entry_label):
            if toolchain is None:
                toolchain = discover_toolchain()
            if mode is ExecutionMode.SYNC and _is_async_callable(toolchain.evaluator.evaluate):
                raise ConfigurationError(
                    f"Toolchain {toolchain.name!r} has an asynchronous evaluator",
                    suggestion="Use the asynchronous compile functions with this toolchain",
                    context={"toolchain": toolchain.name},
                )
            cache = _build_cache(request, mode, import_cache)
            diagnostics = logger if logger is not None else StderrLogger()
            context_cls = (
                AsyncCompilationContext
                if _is_async_callable(toolchain.evaluator.evaluate)
                else CompilationContext
            )
            context = context_cls(
                cache,
                toolchain.parser,
                logger=diagnostics,
                throttle=throttle or DeprecationThrottle(diagnostics, verbose=request.verbose),
                quiet_deps=request.quiet_deps,
                functions=request.functions,
            )

        stage = CompilationStage.RESOLVE_ENTRY
        with _stage(stage, log):
            try:
                entry = yield from _entry_steps(request, context)
            except (ImportNotFoundError, AmbiguousImportError) as e:
                raise e.with_stage(stage) from e

        stage = CompilationStage.EVALUATE
        with _stage(stage, log, url=entry.canonical_url):
            try:
                tree = yield Call(toolchain.evaluator.evaluate, (entry.stylesheet, context))
            except SassException:
                raise
            except AwaitableInSyncModeError as e:
                raise ConfigurationError(
                    "Evaluator returned an awaitable in a synchronous compile",
                    context={"toolchain": toolchain.name},
                ) from e
            except Exception as e:
                raise EvaluationError(
                    str(e) or type(e).__name__, SourceSpan.from_exception(e)
                ) from e

        stage = CompilationStage.ASSEMBLE
        with _stage(stage, log, style=request.style.value):
            try:
                css, builder = yield Call(toolchain.serializer.render, (tree, request.style))
            except SassException:
                raise
            except Exception as e:
                raise EvaluationError(
                    str(e) or type(e).__name__,
                    SourceSpan.from_exception(e),
                    stage=CompilationStage.ASSEMBLE,
                ) from e
            result = assemble(
                css,
                builder,
                style=request.style,
                charset=request.charset,
                source_map=request.source_map,
                loaded_urls=context.loaded_urls,
            )
    except SassException as e:
        log.error(
            "compilation_failed",
            stage=CompilationStage.FAILED.value,
            failed_stage=e.error.stage.value,
            code=e.error.code,
            error=e.error.message,
        )
        raise

    omitted = context.throttle.omitted
    if omitted:
        log.debug("deprecations_omitted", omitted=omitted)
    log.info(
        "compilation_complete",
        stage=CompilationStage.DONE.value,
        loaded=len(result.loaded_urls),
        suppressed_warnings=context.suppressed_warnings,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    return result


def _logger_for(request: CompilationRequest, mode: ExecutionMode) -> Any:
    return logger.bind(entry=request.entry_label, mode=mode.value)


def compile_request(
    request: CompilationRequest,
    toolchain: Toolchain | None = None,
    *,
    import_cache: BaseImportCache | None = None,
    logger: Logger | None = None,
    throttle: DeprecationThrottle | None = None,
) -> CompileResult:
    """Compile synchronously.

    See ``compile_steps`` for arguments.

    Raises:
        SassException: On any fatal failure.
    """
    return run_sync(
        compile_steps(
            request,
            toolchain,
            mode=ExecutionMode.SYNC,
            import_cache=import_cache,
            logger=logger,
            throttle=throttle,
        )
    )


async def compile_request_async(
    request: CompilationRequest,
    toolchain: Toolchain | None = None,
    *,
    import_cache: BaseImportCache | None = None,
    logger: Logger | None = None,
    throttle: DeprecationThrottle | None = None,
) -> CompileResult:
    """Compile, awaiting importers and evaluators that suspend.

    See ``compile_steps`` for arguments.

    Raises:
        SassException: On any fatal failure.
    """
    return await run_async(
        compile_steps(
            request,
            toolchain,
            mode=ExecutionMode.ASYNC,
            import_cache=import_cache,
            logger=logger,
            throttle=throttle,
        )
    )


__all__ = ["ExecutionMode", "compile_request", "compile_request_async", "compile_steps"]
