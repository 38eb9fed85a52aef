"""Sass compilation orchestration.

Resolves imports through an ordered cascade of resolvers, drives an
external parser, evaluator and serializer, and assembles CSS with an
optional source map. Synchronous and asynchronous compiles share one state
machine and produce identical output.

Example:
    >>> import sass_core
    >>> result = sass_core.compile_to_result("styles/main.scss", load_paths=["vendor"])
    >>> print(result.css)
"""

from __future__ import annotations

from sass_core.api import (
    compile,
    compile_async,
    compile_string,
    compile_string_async,
    compile_string_to_result,
    compile_string_to_result_async,
    compile_to_result,
    compile_to_result_async,
)
from sass_core.compilation.assembler import OutputStyle
from sass_core.compilation.errors import (
    AmbiguousImportError,
    CompilationError,
    ConfigurationError,
    EvaluationError,
    ImportNotFoundError,
    SassException,
    SassSyntaxError,
    SourceSpan,
)
from sass_core.compilation.request import CompilationRequest
from sass_core.compilation.result import CompileResult
from sass_core.diagnostics import DeprecationThrottle, Logger, SilentLogger, StderrLogger
from sass_core.importers import (
    AsyncImporter,
    CallableImporter,
    FilesystemImporter,
    Importer,
    ImporterResult,
    PackageConfig,
    PackageEntry,
)
from sass_core.resolution import AsyncImportCache, ImportCache
from sass_core.source_map import SourceMap
from sass_core.syntax import Syntax
from sass_core.toolchain import Toolchain

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Compile functions
    "compile",
    "compile_async",
    "compile_string",
    "compile_string_async",
    "compile_string_to_result",
    "compile_string_to_result_async",
    "compile_to_result",
    "compile_to_result_async",
    # Models
    "CompilationRequest",
    "CompileResult",
    "OutputStyle",
    "SourceMap",
    "Syntax",
    "Toolchain",
    # Importers
    "AsyncImportCache",
    "AsyncImporter",
    "CallableImporter",
    "FilesystemImporter",
    "ImportCache",
    "Importer",
    "ImporterResult",
    "PackageConfig",
    "PackageEntry",
    # Diagnostics
    "DeprecationThrottle",
    "Logger",
    "SilentLogger",
    "StderrLogger",
    # Errors
    "AmbiguousImportError",
    "CompilationError",
    "ConfigurationError",
    "EvaluationError",
    "ImportNotFoundError",
    "SassException",
    "SassSyntaxError",
    "SourceSpan",
]
