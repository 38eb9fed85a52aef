"""Compilation state machine for Sass stylesheets.

A compilation run moves through these stages:
1. START: Validate the request and bind the import cache
2. RESOLVE_ENTRY: Resolve the entry point through the cascade
3. EVALUATE: Evaluate the entry, resolving imports as encountered
4. ASSEMBLE: Render CSS and package the CompileResult

Example:
    >>> from sass_core.compilation.orchestrator import compile_request
    >>> result = compile_request(request, toolchain=toolchain)
    >>> result.css

The orchestrator, assembler and request models live in submodules; this
package re-exports only the error and stage types so that importers can use
them without loading the orchestrator.
"""

from __future__ import annotations

from sass_core.compilation.errors import (
    ERROR_CODES,
    AmbiguousImportError,
    CompilationError,
    ConfigurationError,
    EvaluationError,
    ImportNotFoundError,
    SassException,
    SassSyntaxError,
    SourceSpan,
)
from sass_core.compilation.stages import CompilationStage

__all__ = [
    # Stages
    "CompilationStage",
    # Errors
    "AmbiguousImportError",
    "CompilationError",
    "ConfigurationError",
    "ERROR_CODES",
    "EvaluationError",
    "ImportNotFoundError",
    "SassException",
    "SassSyntaxError",
    "SourceSpan",
]
