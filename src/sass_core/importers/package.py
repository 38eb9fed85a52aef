"""``package:`` URL resolution.

A ``PackageConfig`` maps package names to directories on disk. A reference
``package:name/path/file`` resolves to ``<root>/<package_uri>/path/file``,
after which the usual filesystem lookup rules (partials, extensions, index
files) apply.

Configurations follow the ``package_config.json`` layout and can be loaded
from JSON or YAML:

    configVersion: 2
    packages:
      - name: theme
        rootUri: ../theme
        packageUri: lib/
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from sass_core.compilation.errors import ConfigurationError
from sass_core.importers.base import ImporterResult
from sass_core.importers.filesystem import path_to_url, resolve_file, url_to_path
from sass_core.syntax import Syntax

logger = structlog.get_logger(__name__)

PACKAGE_SCHEME = "package"


class PackageEntry(BaseModel):
    """One package in a package configuration.

    Attributes:
        name: Package name as used in ``package:`` URLs.
        root: Package root directory.
        package_uri: Directory under ``root`` that ``package:`` paths are relative to.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Package name")
    root: Path = Field(..., description="Package root directory")
    package_uri: str = Field(
        default="lib/",
        description="Directory under root that package: paths resolve against",
    )

    @property
    def package_root(self) -> Path:
        """Directory that ``package:name/...`` paths are relative to."""
        return self.root / self.package_uri


class PackageConfig(BaseModel):
    """Mapping from package names to directories.

    Example:
        >>> config = PackageConfig(packages=[PackageEntry(name="theme", root=Path("vendor/theme"))])
        >>> config.get("theme").package_root
        PosixPath('vendor/theme/lib')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    packages: tuple[PackageEntry, ...] = Field(
        default=(),
        description="Configured packages",
    )

    @model_validator(mode="after")
    def _unique_names(self) -> PackageConfig:
        seen: set[str] = set()
        for entry in self.packages:
            if entry.name in seen:
                raise ValueError(f"Duplicate package name: {entry.name}")
            seen.add(entry.name)
        return self

    def get(self, name: str) -> PackageEntry | None:
        """Return the package called ``name``, if configured."""
        for entry in self.packages:
            if entry.name == name:
                return entry
        return None

    @classmethod
    def from_mapping(cls, data: dict[str, Any], base_dir: Path) -> PackageConfig:
        """Build a configuration from ``package_config.json``-shaped data.

        Args:
            data: Parsed configuration.
            base_dir: Directory that relative ``rootUri`` values resolve against.

        Returns:
            Validated PackageConfig.

        Raises:
            ConfigurationError: If the data is malformed or names repeat.
        """
        raw_packages = data.get("packages", [])
        if not isinstance(raw_packages, list):
            raise ConfigurationError(
                "Package configuration 'packages' must be a list",
                context={"packages": repr(raw_packages)},
            )
        try:
            entries = [
                PackageEntry(
                    name=item["name"],
                    root=_root_path(item["rootUri"], base_dir),
                    package_uri=item.get("packageUri", "lib/"),
                )
                for item in raw_packages
            ]
            return cls(packages=tuple(entries))
        except (KeyError, TypeError) as e:
            raise ConfigurationError(
                f"Package configuration entry is missing a field: {e}",
                suggestion="Each package needs 'name' and 'rootUri'",
            ) from e
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid package configuration: {e.errors()[0].get('msg', 'invalid value')}",
                context={"errors": [str(err.get("msg", "")) for err in e.errors()]},
            ) from e

    @classmethod
    def from_file(cls, path: Path) -> PackageConfig:
        """Load a package configuration from a JSON or YAML file.

        Args:
            path: Path to ``package_config.json`` or a ``.yaml``/``.yml`` file.

        Returns:
            Validated PackageConfig.

        Raises:
            ConfigurationError: If the file is missing or unparsable.
        """
        if not path.exists():
            raise ConfigurationError(
                f"Package configuration not found: {path}",
                suggestion=f"Ensure the file exists at: {path.absolute()}",
                context={"path": str(path)},
            )
        content = path.read_text(encoding="utf-8")
        try:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(content) or {}
            else:
                data = json.loads(content)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Invalid package configuration syntax in {path.name}: {e}",
                context={"path": str(path)},
            ) from e
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Package configuration {path.name} must be a mapping",
                context={"path": str(path)},
            )
        return cls.from_mapping(data, path.parent)


def _root_path(root_uri: str, base_dir: Path) -> Path:
    if root_uri.startswith("file:"):
        return url_to_path(root_uri)
    return (base_dir / unquote(root_uri)).resolve()


class PackageImporter:
    """Importer for ``package:`` URLs backed by a ``PackageConfig``."""

    def __init__(self, config: PackageConfig) -> None:
        """Initialize PackageImporter.

        Args:
            config: Package configuration to resolve against.
        """
        self.config = config

    def resolve(self, reference: str, base_url: str | None) -> ImporterResult | None:
        """Resolve a ``package:`` reference.

        A stylesheet loaded from a package is relative-resolved through this
        importer, so a scheme-less ``reference`` with a ``file:`` base_url
        is looked up next to the requesting file.

        Args:
            reference: Reference string.
            base_url: Canonical URL of the requesting stylesheet, or None.

        Returns:
            The loaded stylesheet, or None.
        """
        parsed = urlparse(reference)
        if parsed.scheme == PACKAGE_SCHEME:
            name, _, rest = unquote(parsed.path).partition("/")
            entry = self.config.get(name)
            if entry is None:
                logger.debug("package_not_configured", package=name, reference=reference)
                return None
            target = entry.package_root / rest
        elif not parsed.scheme and base_url is not None and base_url.startswith("file:"):
            target = url_to_path(base_url).parent / unquote(parsed.path)
        else:
            return None
        resolved = resolve_file(target, reference, base_url)
        if resolved is None:
            return None
        return ImporterResult(
            canonical_url=path_to_url(resolved),
            contents=resolved.read_text(encoding="utf-8"),
            syntax=Syntax.for_path(resolved.name),
        )

    def __repr__(self) -> str:
        names = ", ".join(entry.name for entry in self.config.packages)
        return f"PackageImporter([{names}])"


__all__ = ["PACKAGE_SCHEME", "PackageConfig", "PackageEntry", "PackageImporter"]
