"""Deprecation warning throttle.

Stylesheets often repeat the same deprecated construct many times, usually
across several imported files. The throttle counts deprecation notices per
kind for the whole compilation run and forwards only the first
``threshold`` of each kind to the logger. Verbose mode forwards everything.

There is no closing summary of suppressed notices; ``omitted`` exposes the
suppressed counts for callers that want to print one.
"""

from __future__ import annotations

from collections import Counter

import structlog

from sass_core.compilation.errors import SourceSpan
from sass_core.diagnostics.logger import Logger

logger = structlog.get_logger(__name__)

DEFAULT_THRESHOLD = 5


class DeprecationThrottle:
    """Per-run counter that silences repeated deprecations of the same kind.

    Example:
        >>> throttle = DeprecationThrottle(StderrLogger())
        >>> for _ in range(10):
        ...     throttle.report("slash-div", "Using / for division is deprecated")
        >>> throttle.counts["slash-div"], throttle.omitted["slash-div"]
        (10, 5)
    """

    def __init__(
        self,
        logger: Logger,
        *,
        verbose: bool = False,
        threshold: int = DEFAULT_THRESHOLD,
    ) -> None:
        """Initialize DeprecationThrottle.

        Args:
            logger: Logger that receives forwarded notices.
            verbose: Forward every notice, ignoring the threshold.
            threshold: Notices forwarded per kind before suppression.

        Raises:
            ValueError: If threshold is negative.
        """
        if threshold < 0:
            raise ValueError(f"threshold must be non-negative, got {threshold}")
        self.logger = logger
        self.verbose = verbose
        self.threshold = threshold
        self.counts: Counter[str] = Counter()

    def report(self, kind: str, message: str, span: SourceSpan | None = None) -> bool:
        """Count a deprecation notice and forward it unless throttled.

        Args:
            kind: Deprecation kind identifier.
            message: Notice text.
            span: Location of the deprecated construct.

        Returns:
            True if the notice reached the logger.
        """
        self.counts[kind] += 1
        if not self.verbose and self.counts[kind] > self.threshold:
            if self.counts[kind] == self.threshold + 1:
                logger.debug("deprecation_throttled", kind=kind, threshold=self.threshold)
            return False
        self.logger.warn(message, span=span, deprecation=True)
        return True

    @property
    def omitted(self) -> dict[str, int]:
        """Suppressed notices per kind (empty in verbose mode)."""
        if self.verbose:
            return {}
        return {
            kind: count - self.threshold
            for kind, count in self.counts.items()
            if count > self.threshold
        }


__all__ = ["DEFAULT_THRESHOLD", "DeprecationThrottle"]
