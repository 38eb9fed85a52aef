"""Load paths taken from the ``SASS_PATH`` environment variable."""

from __future__ import annotations

import os
from collections.abc import Mapping

SASS_PATH_ENV = "SASS_PATH"


def load_paths_from_environment(
    environ: Mapping[str, str] | None = None,
    *,
    separator: str = os.pathsep,
) -> list[str]:
    """Return the load paths listed in ``SASS_PATH``, in order.

    The variable is split on the platform path separator (``;`` on Windows,
    ``:`` elsewhere). Empty entries are ignored.

    Args:
        environ: Environment to read; defaults to ``os.environ``.
        separator: Separator to split on.

    Returns:
        Load paths in listed order.

    Example:
        >>> load_paths_from_environment({"SASS_PATH": "vendor:lib::shared"}, separator=":")
        ['vendor', 'lib', 'shared']
    """
    env = os.environ if environ is None else environ
    raw = env.get(SASS_PATH_ENV, "")
    return [entry for entry in raw.split(separator) if entry.strip()]


__all__ = ["SASS_PATH_ENV", "load_paths_from_environment"]
