"""Import resolution: the resolver cascade and the import cache.

Example:
    >>> from sass_core.resolution import ImportCache, ResolverSet
    >>> cache = ImportCache(ResolverSet(load_paths=["styles"]))
    >>> cache.resolve("buttons").canonical_url
    'file:///project/styles/_buttons.scss'
"""

from __future__ import annotations

from sass_core.resolution.cascade import ResolverEntry, ResolverKind, ResolverSet
from sass_core.resolution.import_cache import (
    AsyncImportCache,
    BaseImportCache,
    CachedImport,
    ImportCache,
    ImportedStylesheet,
)

__all__ = [
    "AsyncImportCache",
    "BaseImportCache",
    "CachedImport",
    "ImportCache",
    "ImportedStylesheet",
    "ResolverEntry",
    "ResolverKind",
    "ResolverSet",
]
