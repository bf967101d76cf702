"""Command line front-end for ``lib_typed_config``.

Purpose
-------
Let operators check what a service would run with, without writing Python:
import the service's configuration dataclass, stack files, a dotenv file and
the environment over its defaults, and print the result as JSON with secrets
redacted.

Contents
--------
* :func:`cli` – command group; owns traceback and trace-id options.
* :func:`cli_info` – distribution metadata.
* :func:`cli_env_prefix` – prints :func:`default_env_prefix` for a slug.
* :func:`cli_build` – builds ``package.module:Class`` and prints JSON.
* :func:`main` – ``console_scripts`` entry point; exit codes and error
  printing come from ``lib_cli_exit_tools``.

System Role
-----------
Outermost layer. It only talks to :class:`~lib_typed_config.core.ConfigBuilder`
and the source adapters, never to builders or schemas directly.
"""

from __future__ import annotations

import importlib
import sys
from importlib import metadata
from pathlib import Path
from typing import Any, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.dotenv.default import DotEnvSource
from .adapters.env.default import EnvSource, default_env_prefix
from .adapters.sources.file import FileSource
from .core import ConfigBuilder, to_json
from .observability import bind_trace_id

DISTRIBUTION: Final[str] = "lib_typed_config"
CLICK_CONTEXT_SETTINGS: Final[dict[str, Any]] = {"help_option_names": ["-h", "--help"]}
_SHORT_TRACEBACK: Final[int] = 500
_LONG_TRACEBACK: Final[int] = 10_000
_CONFIG_FILE = click.Path(path_type=Path, exists=True, dir_okay=False, readable=True)


def _installed_version() -> str:
    """Version of the installed distribution, ``0.0.0`` when running from a checkout."""

    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(help="Build typed configuration from layered sources", context_settings=CLICK_CONTEXT_SETTINGS)
@click.version_option(version=_installed_version(), prog_name=DISTRIBUTION, message="%(prog)s version %(version)s")
@click.option("--traceback/--no-traceback", default=False, help="Print the full Python traceback on failure")
@click.option("--trace-id", default=None, help="Identifier attached to every log event of this run")
def cli(traceback: bool, trace_id: Optional[str]) -> None:
    """Apply global options before a subcommand runs.

    Side Effects
        Sets ``lib_cli_exit_tools.config.traceback`` (and its colour flag) and
        binds *trace_id* for structured logging.
    """

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback
    bind_trace_id(trace_id)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Show the installed version and supported Python range."""

    try:
        meta = metadata.metadata(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        click.echo(f"{DISTRIBUTION} (metadata unavailable)")
        return
    rows = [
        ("Version", meta.get("Version", _installed_version())),
        ("Requires-Python", meta.get("Requires-Python", ">=3.11")),
        ("Summary", meta.get("Summary")),
    ]
    click.echo(f"Info for {meta.get('Name', DISTRIBUTION)}:")
    for label, value in rows:
        if value:
            click.echo(f"  {label:<16}: {value}")


@cli.command("env-prefix", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("slug")
def cli_env_prefix(slug: str) -> None:
    """Print the environment prefix ``EnvSource`` would use for SLUG.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> CliRunner().invoke(cli, ["env-prefix", "config-kit"]).output.strip()
    'CONFIG_KIT'
    """

    click.echo(default_env_prefix(slug))


@cli.command("build", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("target")
@click.option("--file", "files", multiple=True, type=_CONFIG_FILE, help="TOML/JSON/YAML file; repeatable, later wins")
@click.option(
    "--secret-file",
    "secret_files",
    multiple=True,
    type=_CONFIG_FILE,
    help="Like --file, but the file may provide secret fields",
)
@click.option("--dotenv", type=_CONFIG_FILE, default=None, help="Dotenv file above all files; may provide secrets")
@click.option("--env-prefix", default=None, help="Read environment variables with this prefix last")
@click.option(
    "--env-secrets/--no-env-secrets",
    default=False,
    show_default=True,
    help="Allow the environment to provide secret fields",
)
@click.option("--indent", type=int, default=None, help="Pretty-print with this indent instead of compact JSON")
def cli_build(
    target: str,
    files: Sequence[Path],
    secret_files: Sequence[Path],
    dotenv: Optional[Path],
    env_prefix: Optional[str],
    env_secrets: bool,
    indent: Optional[int],
) -> None:
    """Build TARGET (``package.module:ClassName``) and print it as JSON.

    Sources stack in this order, each overriding the previous: the target's
    defaults, ``--file`` entries, ``--secret-file`` entries, ``--dotenv``, and
    finally the environment when ``--env-prefix`` is given. Secret values are
    printed as ``[redacted]``.
    """

    builder: ConfigBuilder[Any] = ConfigBuilder(_import_target(target))
    for path in files:
        builder.override_with(FileSource(path))
    for path in secret_files:
        builder.override_with(FileSource(path).allow_secrets())
    if dotenv is not None:
        builder.override_with(DotEnvSource(dotenv).allow_secrets())
    if env_prefix is not None:
        env = EnvSource(env_prefix)
        builder.override_with(env.allow_secrets() if env_secrets else env)
    click.echo(to_json(builder.try_build(), indent=indent))


def _import_target(spec: str) -> Any:
    """Resolve ``module:attribute.path`` into the referenced object."""

    module_name, separator, attribute = spec.partition(":")
    if not separator or not module_name or not attribute:
        raise click.BadParameter("Target must look like 'package.module:ClassName'.", param_hint="TARGET")
    try:
        resolved: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise click.BadParameter(f"Cannot import module {module_name!r}: {exc}", param_hint="TARGET") from exc
    for part in attribute.split("."):
        try:
            resolved = getattr(resolved, part)
        except AttributeError as exc:
            raise click.BadParameter(f"{spec!r} has no attribute {part!r}", param_hint="TARGET") from exc
    return resolved


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Run the CLI and return its exit code.

    Failures (a missing value, a refused secret, an unreadable file) are
    printed through ``lib_cli_exit_tools`` and mapped to an exit code instead
    of escaping as a traceback. With *restore_traceback* the global traceback
    flags are put back afterwards, which keeps embedding callers and tests
    isolated.
    """

    saved = (lib_cli_exit_tools.config.traceback, lib_cli_exit_tools.config.traceback_force_color)
    try:
        return lib_cli_exit_tools.run_cli(cli, argv=None if argv is None else list(argv), prog_name=DISTRIBUTION)
    except BaseException as exc:  # noqa: BLE001 - every failure becomes an exit code
        verbose = lib_cli_exit_tools.config.traceback
        lib_cli_exit_tools.print_exception_message(
            trace_back=verbose,
            length_limit=_LONG_TRACEBACK if verbose else _SHORT_TRACEBACK,
        )
        return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback, lib_cli_exit_tools.config.traceback_force_color = saved
        bind_trace_id(None)


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
