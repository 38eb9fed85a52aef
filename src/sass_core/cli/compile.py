"""``sass-core compile`` command.

Compiles one stylesheet and writes CSS to a file or stdout. With
``--source-map`` the map is written next to the CSS and a
``sourceMappingURL`` comment pointing at it is appended.

Example:
    $ sass-core compile styles/main.scss -I node_modules -o build/main.css
    $ sass-core compile main.scss --style compressed --source-map build/main.css.map
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import click
import structlog

from sass_core.api import compile_to_result, compile_to_result_async
from sass_core.cli.utils import ExitCode, error_exit, info, warn
from sass_core.compilation.assembler import OutputStyle
from sass_core.compilation.errors import SassException
from sass_core.importers.package import PackageConfig
from sass_core.source_map import SourceMap
from sass_core.telemetry.logging import configure_logging
from sass_core.toolchain import discover_toolchain

logger = structlog.get_logger(__name__)


def _relative_url(target: Path, start: Path) -> str:
    return Path(os.path.relpath(target.resolve(), start.resolve())).as_posix()


def _write_source_map(source_map: SourceMap, map_path: Path, output: Path | None) -> str:
    """Write the source map and return the comment pointing at it."""
    css_dir = output.parent if output is not None else Path.cwd()
    target_url = _relative_url(output, map_path.parent) if output is not None else None
    source_map = source_map.model_copy(update={"target_url": target_url})
    map_path.parent.mkdir(parents=True, exist_ok=True)
    map_path.write_text(source_map.to_json(), encoding="utf-8")
    return f"\n\n/*# sourceMappingURL={_relative_url(map_path, css_dir)} */"


@click.command(
    name="compile",
    help="Compile a Sass stylesheet to CSS.",
    epilog="""
Examples:
    $ sass-core compile main.scss
    $ sass-core compile main.scss -I vendor -o build/main.css
    $ sass-core compile main.scss --style compressed --source-map build/main.css.map
""",
)
@click.argument(
    "input_path",
    metavar="INPUT",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--load-path",
    "-I",
    "load_paths",
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory searched for imports (repeatable, in priority order).",
    metavar="DIR",
)
@click.option(
    "--style",
    type=click.Choice([style.value for style in OutputStyle], case_sensitive=False),
    default=OutputStyle.EXPANDED.value,
    show_default=True,
    help="Output style.",
)
@click.option(
    "--source-map",
    "source_map_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write a source map to PATH.",
    metavar="PATH",
)
@click.option(
    "--package-config",
    "package_config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Package configuration (JSON or YAML) for package: imports.",
    metavar="PATH",
)
@click.option(
    "--quiet-deps",
    is_flag=True,
    default=False,
    help="Silence warnings from dependencies.",
)
@click.option("--verbose", is_flag=True, default=False, help="Print every deprecation warning.")
@click.option(
    "--charset/--no-charset",
    default=True,
    show_default=True,
    help="Emit @charset or a BOM for non-ASCII output.",
)
@click.option("--color/--no-color", default=False, show_default=True, help="Color diagnostics.")
@click.option("--async", "use_async", is_flag=True, default=False, help="Use the async compiler.")
@click.option("--toolchain", "toolchain_name", help="Name of the toolchain entry point to use.")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write CSS to PATH instead of stdout.",
    metavar="PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Level of the compiler's own log events.",
)
def compile_command(
    input_path: Path,
    load_paths: tuple[Path, ...],
    style: str,
    source_map_path: Path | None,
    package_config_path: Path | None,
    quiet_deps: bool,
    verbose: bool,
    charset: bool,
    color: bool,
    use_async: bool,
    toolchain_name: str | None,
    output: Path | None,
    log_level: str,
) -> None:
    """Compile INPUT to CSS."""
    configure_logging(log_level=log_level)

    try:
        package_config = (
            PackageConfig.from_file(package_config_path) if package_config_path else None
        )
        options = {
            "load_paths": load_paths,
            "package_config": package_config,
            "style": OutputStyle(style.lower()),
            "quiet_deps": quiet_deps,
            "verbose": verbose,
            "source_map": source_map_path is not None,
            "charset": charset,
            "color": color,
            "toolchain": discover_toolchain(toolchain_name),
        }
        if use_async:
            result = asyncio.run(compile_to_result_async(input_path, **options))
        else:
            result = compile_to_result(input_path, **options)
    except SassException as e:
        error_exit(e.error.format(), exit_code=ExitCode(e.exit_code))

    css = result.css
    if source_map_path is not None:
        if result.source_map is None:
            warn("The toolchain produced no source map")
        else:
            try:
                css += _write_source_map(result.source_map, source_map_path, output)
            except PermissionError:
                error_exit(
                    "Cannot write source map",
                    exit_code=ExitCode.PERMISSION_ERROR,
                    path=str(source_map_path),
                )

    if output is None:
        click.echo(css)
        return

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(css + "\n", encoding="utf-8")
    except PermissionError:
        error_exit("Cannot write output", exit_code=ExitCode.PERMISSION_ERROR, path=str(output))
    logger.debug("css_written", path=str(output), loaded=len(result.loaded_urls))
    info(f"Compiled {input_path} to {output}")


__all__ = ["compile_command"]
