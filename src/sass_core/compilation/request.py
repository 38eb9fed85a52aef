"""Compilation request model.

A ``CompilationRequest`` captures everything one compilation run needs: the
entry point, the resolver configuration, diagnostic flags and output
options. It is immutable once built.

Example:
    >>> request = CompilationRequest.from_options(
    ...     path=Path("styles/main.scss"),
    ...     load_paths=[Path("node_modules")],
    ...     style=OutputStyle.COMPRESSED,
    ... )
    >>> request.entry_label
    'styles/main.scss'
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from sass_core.compilation.assembler import OutputStyle
from sass_core.compilation.errors import ConfigurationError
from sass_core.importers.package import PackageConfig
from sass_core.resolution.cascade import ResolverSet
from sass_core.syntax import Syntax

SYNTHETIC_ENTRY_URL = "stdin:"
"""Canonical URL given to in-memory sources compiled without a URL."""


def _is_importer(value: Any) -> bool:
    return callable(getattr(value, "resolve", None))


class CompilationRequest(BaseModel):
    """Immutable description of one compilation run.

    Exactly one of ``path`` and ``source`` is set. ``url``, ``syntax`` and
    ``importer`` only apply to ``source`` compiles.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    # Entry point
    path: Path | None = Field(default=None, description="Entry stylesheet on disk")
    source: str | None = Field(default=None, description="In-memory entry stylesheet")
    url: str | None = Field(default=None, description="Canonical URL of the in-memory source")
    syntax: Syntax | None = Field(default=None, description="Syntax of the in-memory source")
    importer: Any = Field(
        default=None,
        description="Importer for relative loads from the in-memory source",
    )

    # Resolvers
    importers: tuple[Any, ...] = Field(default=(), description="Explicit importers, in order")
    load_paths: tuple[Path, ...] = Field(default=(), description="Load path directories")
    environment_load_paths: tuple[Path, ...] | None = Field(
        default=None,
        description="Stand-in for SASS_PATH; None reads the environment",
    )
    package_config: PackageConfig | None = Field(
        default=None,
        description="Configuration for package: URLs",
    )

    # Evaluation
    functions: dict[str, Callable[..., Any]] = Field(
        default_factory=dict,
        description="Custom functions exposed to the evaluator, keyed by signature",
    )

    # Diagnostics
    quiet_deps: bool = Field(default=False, description="Silence warnings from dependencies")
    verbose: bool = Field(default=False, description="Disable the deprecation throttle")

    # Output
    style: OutputStyle = Field(default=OutputStyle.EXPANDED, description="Output style")
    source_map: bool = Field(default=False, description="Produce a source map")
    charset: bool = Field(default=True, description="Emit a charset marker for non-ASCII CSS")

    @field_validator("importers")
    @classmethod
    def _check_importers(cls, value: tuple[Any, ...]) -> tuple[Any, ...]:
        for index, importer in enumerate(value):
            if not _is_importer(importer):
                raise ValueError(
                    f"importers[{index}] has no resolve() method: {type(importer).__name__}"
                )
        return value

    @field_validator("importer")
    @classmethod
    def _check_importer(cls, value: Any) -> Any:
        if value is not None and not _is_importer(value):
            raise ValueError(f"importer has no resolve() method: {type(value).__name__}")
        return value

    @model_validator(mode="after")
    def _check_entry_point(self) -> CompilationRequest:
        if (self.path is None) == (self.source is None):
            raise ValueError("exactly one of path and source must be given")
        if self.path is not None:
            for name in ("url", "syntax", "importer"):
                if getattr(self, name) is not None:
                    raise ValueError(f"{name} only applies when compiling a source string")
        if self.importer is not None and self.url is None:
            raise ValueError("importer requires url")
        return self

    @classmethod
    def from_options(cls, **options: Any) -> CompilationRequest:
        """Build a request, reporting invalid options as ConfigurationError.

        Raises:
            ConfigurationError: If the options are invalid or contradictory.
        """
        try:
            return cls(**options)
        except ValidationError as e:
            errors = e.errors()
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ())) or "request"
            raise ConfigurationError(
                f"Invalid compilation request ({location}): {first.get('msg', 'invalid value')}",
                suggestion="Check the arguments passed to the compile function",
                context={"errors": [str(err.get("msg", "")) for err in errors]},
            ) from e

    @property
    def entry_url(self) -> str:
        """Canonical URL of an in-memory source (synthetic if none given)."""
        return self.url or SYNTHETIC_ENTRY_URL

    @property
    def entry_syntax(self) -> Syntax:
        """Syntax of an in-memory source.

        An explicit hint wins; otherwise the URL suffix decides, defaulting
        to SCSS.
        """
        if self.syntax is not None:
            return self.syntax
        return Syntax.for_path(self.url) if self.url else Syntax.SCSS

    @property
    def entry_label(self) -> str:
        """Short description of the entry point for logs."""
        if self.path is not None:
            return str(self.path)
        return self.url or "<string>"

    def resolver_set(self) -> ResolverSet:
        """Build the secondary resolvers described by this request."""
        return ResolverSet(
            importers=self.importers,
            load_paths=self.load_paths,
            environment_load_paths=self.environment_load_paths,
            package_config=self.package_config,
        )


__all__ = ["SYNTHETIC_ENTRY_URL", "CompilationRequest"]
