"""Main Click CLI entry point for the neoscopes command.

Every invocation builds a fresh :class:`~neoscopes.registry.ScopeRegistry`
from the project-level config file in ``--cwd`` and then runs the
subcommand against it.  Nothing is persisted between invocations.

Entry point registered in pyproject.toml::

    [project.scripts]
    neoscopes = "neoscopes.cli.main:cli"

Usage examples::

    neoscopes list
    neoscopes show git:main --json-output
    neoscopes paths --scope api | xargs rg TODO
    neoscopes paths src/app.py          # startup scope from the arguments
    neoscopes select --plain
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import click

from neoscopes import __version__
from neoscopes.config import DEFAULT_CONFIG_FILE_NAME, ScopesConfig
from neoscopes.errors import ScopeError
from neoscopes.ingest import setup
from neoscopes.models.scope import Scope
from neoscopes.picker import PlainPicker, default_picker
from neoscopes.registry import ScopeRegistry


@click.group()
@click.version_option(version=__version__, prog_name="neoscopes")
@click.option(
    "--cwd",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Project directory holding the config file. Defaults to the current directory.",
)
@click.option(
    "--config",
    "config_filename",
    default=None,
    envvar="NEOSCOPES_CONFIG_FILENAME",
    help=f"Project-level config file name (default: {DEFAULT_CONFIG_FILE_NAME}).",
)
@click.pass_context
def cli(ctx: click.Context, cwd: Optional[str], config_filename: Optional[str]) -> None:
    """neoscopes -- Named scopes of directories and files for search tools."""
    ctx.ensure_object(dict)
    ctx.obj["cwd"] = str(Path(cwd).resolve()) if cwd else str(Path.cwd())
    ctx.obj["config_filename"] = config_filename


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@cli.command("list")
@click.option(
    "--json-output",
    "output_json",
    is_flag=True,
    default=False,
    help="Output scopes as JSON instead of human-readable text.",
)
@click.pass_context
def list_scopes(ctx: click.Context, output_json: bool) -> None:
    """List all scopes defined by the project configuration."""
    registry = _build_registry(ctx)
    current = registry.get_current_scope()
    scopes = [registry.get(name) for name in registry.names()]

    if output_json:
        click.echo(json.dumps(
            {
                "current_scope": current.name if current else None,
                "scopes": [scope.to_summary() for scope in scopes],
            },
            indent=2,
        ))
        return

    if not scopes:
        click.secho("No scopes defined.", fg="yellow")
        return
    for scope in scopes:
        marker = "*" if current is not None and scope.name == current.name else " "
        origin = f"[{scope.origin}]" if scope.origin else ""
        click.echo(
            f"{marker} {scope.name:30s} {origin:6s} "
            f"{len(scope.dirs)} dirs, {len(scope.files)} files"
        )


@cli.command()
@click.argument("name")
@click.option(
    "--json-output",
    "output_json",
    is_flag=True,
    default=False,
    help="Output the scope as JSON instead of human-readable text.",
)
@click.pass_context
def show(ctx: click.Context, name: str, output_json: bool) -> None:
    """Show the directories and files of the scope NAME."""
    registry = _build_registry(ctx)
    try:
        scope = registry.get(name)
    except ScopeError as exc:
        _fail(str(exc))

    if output_json:
        click.echo(json.dumps(scope.to_summary(), indent=2))
        return

    click.secho(scope.name, fg="cyan", bold=True)
    if scope.origin:
        click.echo(f"Origin: {scope.origin}")
    click.secho("Directories", fg="green", bold=True)
    for directory in scope.dirs:
        click.echo(f"  {directory}")
    if scope.files:
        click.secho("Files", fg="blue", bold=True)
        for file_path in scope.files:
            click.echo(f"  {file_path}")


@cli.command()
@click.argument("targets", nargs=-1)
@click.option("--scope", "scope_name", default=None, help="Scope to print. Defaults to the configured current scope.")
@click.option("--dirs-only", is_flag=True, default=False, help="Print directories only, without files.")
@click.pass_context
def paths(
    ctx: click.Context,
    targets: tuple[str, ...],
    scope_name: Optional[str],
    dirs_only: bool,
) -> None:
    """Print the paths of a scope, one per line.

    With --scope the named scope is selected (refreshing git scopes).
    Otherwise the configured current scope is used, and when there is none
    a startup scope is built from TARGETS (their directories, or the
    project directory when no TARGETS exist).
    """
    registry = _build_registry(ctx)
    try:
        if scope_name is not None:
            registry.set_current(scope_name)
        elif targets or registry.get_current_scope() is None:
            registry.add_startup_scope(
                argv=["neoscopes", *targets],
                cwd=ctx.obj["cwd"],
            )
        lines = registry.get_current_dirs() if dirs_only else registry.get_current_paths()
    except ScopeError as exc:
        _fail(str(exc))

    for line in lines:
        click.echo(line)


@cli.command()
@click.option("--plain", is_flag=True, default=False, help="Use the plain numbered prompt instead of the rich table.")
@click.pass_context
def select(ctx: click.Context, plain: bool) -> None:
    """Pick a scope interactively and print its paths."""
    registry = _build_registry(ctx)
    picker = PlainPicker() if plain else default_picker()
    try:
        scope = registry.select(picker)
    except ScopeError as exc:
        _fail(str(exc))

    if scope is None:
        click.secho("No scope selected.", fg="yellow", err=True)
        return
    for line in scope.paths():
        click.echo(line)


@cli.command()
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing config file.")
@click.pass_context
def init(ctx: click.Context, force: bool) -> None:
    """Write a starter project config file with a single scope."""
    filename = ctx.obj["config_filename"] or DEFAULT_CONFIG_FILE_NAME
    target = Path(ctx.obj["cwd"]) / filename
    if target.exists() and not force:
        _fail(f"{target} already exists. Use --force to overwrite.")

    config = ScopesConfig(scopes=[Scope(name="project", dirs=["."])])
    written = config.save(str(target))
    click.secho(f"Wrote {written}", fg="green")


@cli.command()
@click.pass_context
def serve(ctx: click.Context) -> None:
    """Run the neoscopes MCP server over stdio."""
    from neoscopes.mcp.server import create_server

    try:
        server = create_server(
            cwd=ctx.obj["cwd"],
            config_filename=ctx.obj["config_filename"],
        )
    except ScopeError as exc:
        _fail(str(exc))
    server.run(transport="stdio")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _build_registry(ctx: click.Context) -> ScopeRegistry:
    """Create a registry populated from the project config in ``--cwd``."""
    config: dict = {}
    if ctx.obj.get("config_filename"):
        config["neoscopes_config_filename"] = ctx.obj["config_filename"]

    registry = ScopeRegistry()
    try:
        setup(registry, config, cwd=ctx.obj["cwd"])
    except ScopeError as exc:
        _fail(f"Failed to load configuration: {exc}")
    return registry


def _fail(message: str) -> None:
    click.secho("ERROR: " + message, fg="red", err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()
