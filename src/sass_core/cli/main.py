"""Entry point for the ``sass-core`` CLI.

Example:
    $ sass-core --help
    $ sass-core compile styles/main.scss -o build/main.css
"""

from __future__ import annotations

from importlib.metadata import version as get_version

import click

from sass_core.cli.compile import compile_command


def _get_version() -> str:
    """Installed package version, or 'unknown' when running from a checkout."""
    try:
        return get_version("sass-core")
    except Exception:
        return "unknown"


@click.group(
    name="sass-core",
    help="sass-core - compile Sass stylesheets through a pluggable import cascade.",
    epilog="Use 'sass-core <command> --help' for command-specific help.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(version=_get_version(), prog_name="sass-core", message="%(prog)s %(version)s")
def cli() -> None:
    """Root command group."""


cli.add_command(compile_command)


__all__ = ["cli"]
