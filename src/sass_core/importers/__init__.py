"""Import resolution strategies.

Exports the importer protocols, the filesystem and ``package:`` importers,
and ``SASS_PATH`` handling.
"""

from __future__ import annotations

from sass_core.importers.base import (
    AnyImporter,
    AsyncImporter,
    CallableImporter,
    Importer,
    ImporterResult,
)
from sass_core.importers.environment import SASS_PATH_ENV, load_paths_from_environment
from sass_core.importers.filesystem import FilesystemImporter, path_to_url, url_to_path
from sass_core.importers.package import PackageConfig, PackageEntry, PackageImporter

__all__ = [
    "AnyImporter",
    "AsyncImporter",
    "CallableImporter",
    "FilesystemImporter",
    "Importer",
    "ImporterResult",
    "PackageConfig",
    "PackageEntry",
    "PackageImporter",
    "SASS_PATH_ENV",
    "load_paths_from_environment",
    "path_to_url",
    "url_to_path",
]
