"""CLI adapter for ``lib_versioned_config`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators resolve a configuration file from the shell: print the latest
configuration as JSON, check which version a file declares, or upgrade an
older file to the latest schema.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling into ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_read` – resolves a file and prints it as JSON.
* :func:`cli_version` – prints the version tag a YAML file declares.
* :func:`cli_upgrade` – resolves a file and prints it as latest-version YAML.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
Outermost layer: it only calls :mod:`lib_versioned_config.core` and renders
library errors (message plus stacked details) for humans.
"""

from __future__ import annotations

import sys
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click
import yaml

from .adapters.file_loaders.structured import FileReader
from .core import read_file, read_version
from .domain.document import RawDocument
from .domain.errors import ConfigError, details, is_not_found
from .domain.v1alpha2 import Config

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000
_DIST_NAME: Final[str] = "lib_versioned_config"

_PATH_ARGUMENT = click.Path(path_type=Path, dir_okay=False)


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when metadata is missing."""

    try:
        return metadata.version(_DIST_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Resolve versioned configuration files into the latest schema",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name=_DIST_NAME,
    message="lib_versioned_config version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command storing the traceback preference for ``lib_cli_exit_tools``."""

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata(_DIST_NAME)
    except metadata.PackageNotFoundError:
        click.echo("lib_versioned_config (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', _DIST_NAME)}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("read", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("path", type=_PATH_ARGUMENT)
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
def cli_read(path: Path, indent: Optional[int]) -> None:
    """Resolve PATH (YAML or Jsonnet, any supported version) and print it as JSON."""

    config = _resolve(path)
    click.echo(config.model_dump_json(by_alias=True, exclude_none=True, indent=indent))


@cli.command("version", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("path", type=_PATH_ARGUMENT)
def cli_version(path: Path) -> None:
    """Print the version tag declared at the top of the YAML file PATH.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> target = Path(tmp.name) / "config.yaml"
    >>> _ = target.write_text("version: v1alpha1\\n", encoding="utf-8")
    >>> CliRunner().invoke(cli, ["version", str(target)]).output.strip()
    'v1alpha1'
    >>> tmp.cleanup()
    """

    if RawDocument(b"", path.suffix).is_expression:
        raise click.ClickException(
            f"{path} is a jsonnet config; only YAML files declare a version to inspect (use 'read' instead)"
        )
    try:
        version = read_version(FileReader().read(path))
    except ConfigError as exc:
        raise click.ClickException(_describe(path, exc)) from exc
    click.echo(version or "(missing)")


@cli.command("upgrade", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("path", type=_PATH_ARGUMENT)
def cli_upgrade(path: Path) -> None:
    """Resolve PATH and print it as a latest-version YAML document."""

    config = _resolve(path)
    document = config.model_dump(by_alias=True, exclude_defaults=True)
    click.echo(yaml.safe_dump(document, sort_keys=False), nl=False)


def _resolve(path: Path) -> Config:
    try:
        return read_file(path)
    except ConfigError as exc:
        raise click.ClickException(_describe(path, exc)) from exc


def _describe(path: Path, exc: ConfigError) -> str:
    """Render *exc* for humans: not-found shortcut, else message plus details."""

    if is_not_found(exc):
        return f"config file not found: {path}"
    return f"{exc}{details(exc)}"


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name=_DIST_NAME,
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
