"""Result of a successful compilation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from sass_core.source_map import SourceMap


class CompileResult(BaseModel):
    """CSS produced by a compilation run.

    Only successful runs produce a result; failures raise a
    ``SassException`` instead.

    Attributes:
        css: The compiled CSS, including any charset marker.
        source_map: Source map, if one was requested. Its ``target_url`` is
            unset and the CSS carries no ``sourceMappingURL`` comment.
        loaded_urls: Canonical URLs of every stylesheet loaded by the run.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    css: str = Field(..., description="Compiled CSS")
    source_map: SourceMap | None = Field(default=None, description="Source map, if requested")
    loaded_urls: frozenset[str] = Field(
        default_factory=frozenset,
        description="Canonical URLs of loaded stylesheets",
    )


__all__ = ["CompileResult"]
