"""Root CLI group for catgen with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from catgen import __version__
from catgen.commands import register_commands
from catgen.commands._base import CatGroup
from catgen.commands._context import AppContext
from catgen.config.settings import CatgenSettings


@click.group(
    cls=CatGroup,
    invoke_without_command=True,
    examples="""\
  catgen generate manifest
  catgen --catalog docs/catalog generate manifest -o source=manifest.yml
  catgen show event order-created
  catgen versions service orders-service""",
)
@click.version_option(version=__version__, prog_name="catgen")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logs.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--catalog",
    "catalog_root",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Catalog directory (default: from catgen.toml, PROJECT_DIR, or CWD).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    catalog_root: Path | None,
) -> None:
    """catgen: reconcile discovered schemas into a documentation catalog."""
    ctx.ensure_object(dict)
    settings = CatgenSettings.from_cli(
        config_path=config_path,
        catalog_root=catalog_root,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
