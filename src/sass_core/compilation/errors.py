"""Compilation error handling.

Every fatal failure of a compilation run is raised as a ``SassException``
subclass wrapping a structured ``CompilationError``. The structured error
carries the stage, an error code, a user-facing message, an optional
suggestion and context (source location, requesting URL, reference).

Exception Hierarchy:
    SassException (base)
    ├── ImportNotFoundError   # Cascade exhausted (E201)
    ├── AmbiguousImportError  # A resolver found several candidates (E202)
    ├── SassSyntaxError       # Raised by the parser (E301)
    ├── EvaluationError       # Raised by the evaluator or serializer (E302)
    └── ConfigurationError    # Contradictory request configuration (E101)

Exit Code Mapping:
    1: Configuration error (START stage)
    2: Any other compilation error
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from sass_core.compilation.stages import CompilationStage


class SourceSpan(BaseModel):
    """Location in a stylesheet, used for user-facing error display.

    Attributes:
        url: Canonical URL of the stylesheet, if known.
        line: Zero-based line.
        column: Zero-based column.
        text: Optional source excerpt.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str | None = Field(default=None, description="Canonical URL of the stylesheet")
    line: int = Field(default=0, ge=0, description="Zero-based line")
    column: int = Field(default=0, ge=0, description="Zero-based column")
    text: str | None = Field(default=None, description="Source excerpt")

    def format(self) -> str:
        """Format as ``url:line:column`` using one-based line and column."""
        return f"{self.url or '-'}:{self.line + 1}:{self.column + 1}"

    @classmethod
    def from_exception(cls, error: BaseException, url: str | None = None) -> SourceSpan | None:
        """Best-effort location from a collaborator exception.

        Reads ``url``, ``line`` and ``column`` attributes when the exception
        has them. Returns None when neither a URL nor a line is known.
        """
        error_url = getattr(error, "url", None)
        if isinstance(error_url, str):
            url = error_url
        line = getattr(error, "line", None)
        column = getattr(error, "column", None)
        if url is None and line is None:
            return None
        return cls(
            url=url,
            line=line if isinstance(line, int) and line >= 0 else 0,
            column=column if isinstance(column, int) and column >= 0 else 0,
        )


class CompilationError(BaseModel):
    """Structured error from a compilation run.

    Attributes:
        stage: Stage where the error occurred.
        code: Error code for programmatic handling (e.g., "E201").
        message: Human-readable error message.
        suggestion: Actionable suggestion for fixing the error.
        span: Source location, when the failure has one.
        context: Additional context (reference, base URL, candidates, ...).

    Example:
        >>> error = CompilationError(
        ...     stage=CompilationStage.EVALUATE,
        ...     code="E201",
        ...     message="Can't find stylesheet to import: 'colors'",
        ... )
        >>> print(error.format())
        [EVALUATE] E201: Can't find stylesheet to import: 'colors'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    stage: CompilationStage = Field(
        ...,
        description="Stage where the error occurred",
    )
    code: str = Field(
        ...,
        min_length=1,
        pattern=r"^E\d{3}$",
        description="Error code (E001-E999)",
        examples=["E101", "E201", "E301"],
    )
    message: str = Field(
        ...,
        min_length=1,
        description="Human-readable error message",
    )
    suggestion: str | None = Field(
        default=None,
        description="Actionable suggestion for fixing the error",
    )
    span: SourceSpan | None = Field(
        default=None,
        description="Source location of the failure",
    )
    context: dict[str, Any] | None = Field(
        default=None,
        description="Additional context (reference, base URL, ...)",
    )

    @property
    def exit_code(self) -> int:
        """CLI exit code for this error."""
        return self.stage.exit_code

    def format(self, include_suggestion: bool = True) -> str:
        """Format the error for display.

        Args:
            include_suggestion: Whether to include the suggestion line.

        Returns:
            Formatted error string.
        """
        lines = [f"[{self.stage.value}] {self.code}: {self.message}"]
        if self.span is not None:
            lines.append(f"  at {self.span.format()}")
        if include_suggestion and self.suggestion:
            lines.append(f"Suggestion: {self.suggestion}")
        return "\n".join(lines)


class SassException(Exception):
    """Base exception for all fatal compilation failures.

    Wraps a CompilationError to provide both exception behavior and
    structured error data.

    Attributes:
        error: The structured CompilationError.
    """

    code = "E000"

    def __init__(self, error: CompilationError) -> None:
        """Initialize with a CompilationError.

        Args:
            error: The structured error details.
        """
        self.error = error
        super().__init__(error.format(include_suggestion=False))

    @property
    def exit_code(self) -> int:
        """CLI exit code for this exception."""
        return self.error.exit_code

    @property
    def span(self) -> SourceSpan | None:
        """Source location of the failure, if any."""
        return self.error.span

    def with_stage(self, stage: CompilationStage) -> SassException:
        """Return a copy of this exception re-tagged with ``stage``."""
        retagged = type(self).__new__(type(self))
        retagged.__dict__.update(self.__dict__)
        retagged.error = self.error.model_copy(update={"stage": stage})
        Exception.__init__(retagged, retagged.error.format(include_suggestion=False))
        return retagged


class ImportNotFoundError(SassException):
    """Raised when every resolver in the cascade declines a reference.

    Example:
        >>> raise ImportNotFoundError("colors", base_url="file:///app/main.scss")
        Traceback (most recent call last):
            ...
        ImportNotFoundError: [EVALUATE] E201: Can't find stylesheet to import: 'colors'
    """

    code = "E201"

    def __init__(
        self,
        reference: str,
        base_url: str | None = None,
        *,
        stage: CompilationStage = CompilationStage.EVALUATE,
        span: SourceSpan | None = None,
    ) -> None:
        """Initialize ImportNotFoundError.

        Args:
            reference: The unresolved reference string.
            base_url: Canonical URL of the requesting stylesheet, or None for
                the entry point.
            stage: Stage in which resolution failed.
            span: Location of the import statement, if known.
        """
        self.reference = reference
        self.base_url = base_url
        super().__init__(
            CompilationError(
                stage=stage,
                code=self.code,
                message=f"Can't find stylesheet to import: '{reference}'",
                suggestion=(
                    "Check the reference spelling, or add a load path or importer "
                    "that can resolve it"
                ),
                span=span,
                context={"reference": reference, "base_url": base_url},
            )
        )


class AmbiguousImportError(SassException):
    """Raised when a resolver finds several equally valid candidates.

    Ambiguity is terminal for the resolution attempt: later resolvers in the
    cascade are not consulted.
    """

    code = "E202"

    def __init__(
        self,
        reference: str,
        candidates: list[str],
        base_url: str | None = None,
        *,
        stage: CompilationStage = CompilationStage.EVALUATE,
    ) -> None:
        """Initialize AmbiguousImportError.

        Args:
            reference: The reference being resolved.
            candidates: Canonical URLs of the competing candidates.
            base_url: Canonical URL of the requesting stylesheet.
            stage: Stage in which resolution failed.
        """
        self.reference = reference
        self.candidates = list(candidates)
        self.base_url = base_url
        super().__init__(
            CompilationError(
                stage=stage,
                code=self.code,
                message=(
                    f"It's not clear which file to import for '{reference}'. "
                    f"Found: {', '.join(self.candidates)}"
                ),
                suggestion="Rename or remove one of the candidates, or import with an extension",
                context={
                    "reference": reference,
                    "base_url": base_url,
                    "candidates": self.candidates,
                },
            )
        )


class SassSyntaxError(SassException):
    """Raised when the parser rejects a stylesheet."""

    code = "E301"

    def __init__(
        self,
        message: str,
        span: SourceSpan | None = None,
        *,
        stage: CompilationStage = CompilationStage.EVALUATE,
    ) -> None:
        """Initialize SassSyntaxError.

        Args:
            message: Parser error message.
            span: Location of the syntax error.
            stage: Stage in which parsing happened.
        """
        super().__init__(
            CompilationError(
                stage=stage,
                code=self.code,
                message=message,
                span=span,
            )
        )


class EvaluationError(SassException):
    """Raised when the evaluator (or serializer) fails."""

    code = "E302"

    def __init__(
        self,
        message: str,
        span: SourceSpan | None = None,
        *,
        stage: CompilationStage = CompilationStage.EVALUATE,
    ) -> None:
        """Initialize EvaluationError.

        Args:
            message: Evaluator error message.
            span: Location of the failing construct.
            stage: Stage in which the failure happened.
        """
        super().__init__(
            CompilationError(
                stage=stage,
                code=self.code,
                message=message,
                span=span,
            )
        )


class ConfigurationError(SassException):
    """Raised for contradictory or unusable request configuration."""

    code = "E101"

    def __init__(
        self,
        message: str,
        *,
        suggestion: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigurationError.

        Args:
            message: What is wrong with the configuration.
            suggestion: How to fix it.
            context: Offending values.
        """
        super().__init__(
            CompilationError(
                stage=CompilationStage.START,
                code=self.code,
                message=message,
                suggestion=suggestion,
                context=context,
            )
        )


ERROR_CODES = {
    # START errors
    "E101": "Invalid compilation configuration",
    # Resolution errors
    "E201": "Stylesheet to import not found",
    "E202": "Ambiguous import",
    # Evaluation errors
    "E301": "Stylesheet syntax error",
    "E302": "Evaluation error",
}


__all__ = [
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
