"""Command: run a generator and reconcile its output into the catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from catgen.commands._base import CatCommand

if TYPE_CHECKING:
    from catgen.commands._context import AppContext


def _parse_options(
    _ctx: click.Context, _param: click.Parameter, values: tuple[str, ...]
) -> dict[str, Any]:
    options: dict[str, Any] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            msg = f"expected KEY=VALUE, got {item!r}"
            raise click.BadParameter(msg)
        options[key.strip()] = value
    return options


@click.command(
    cls=CatCommand,
    examples="""\
  catgen generate manifest
  catgen generate manifest --option source=catalog-manifest.yml
  catgen generate manifest -o source=api/manifest.yml -o include_all_versions=true
  catgen --json generate manifest""",
)
@click.argument("name")
@click.option(
    "-o",
    "--option",
    "overrides",
    multiple=True,
    callback=_parse_options,
    help="Generator option as KEY=VALUE (repeatable; overrides catgen.toml).",
)
@click.pass_obj
def generate(app: AppContext, name: str, overrides: dict[str, Any]) -> None:
    """Run generator NAME and reconcile what it discovers."""
    from catgen.services.generate import GenerateService

    result = GenerateService(app.catalog, app.settings).generate(name, overrides=overrides)
    app.emit(result)
