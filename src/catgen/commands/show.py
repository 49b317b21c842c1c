"""Commands: inspect catalog resources."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from catgen.commands._base import CatCommand
from catgen.domain.types import ResourceKind

if TYPE_CHECKING:
    from catgen.commands._context import AppContext

_KINDS = click.Choice([k.value for k in ResourceKind], case_sensitive=False)


@click.command(
    cls=CatCommand,
    examples="""\
  catgen show event order-created
  catgen show service "Orders Service" --version 0.9.0
  catgen --json show domain orders""",
)
@click.argument("kind", type=_KINDS, metavar="KIND")
@click.argument("resource_id")
@click.option("--version", "version", default=None, help="Version to show (default: latest).")
@click.pass_obj
def show(app: AppContext, kind: str, resource_id: str, version: str | None) -> None:
    """Show a resource's front matter and narrative."""
    from catgen.services.catalog import CatalogService

    app.emit(CatalogService(app.catalog).show(kind, resource_id, version=version))


@click.command(
    cls=CatCommand,
    examples="""\
  catgen versions event order-created
  catgen -q versions service orders-service""",
)
@click.argument("kind", type=_KINDS, metavar="KIND")
@click.argument("resource_id")
@click.pass_obj
def versions(app: AppContext, kind: str, resource_id: str) -> None:
    """List the latest and archived versions of a resource."""
    from catgen.services.catalog import CatalogService

    app.emit(CatalogService(app.catalog).versions(kind, resource_id))
