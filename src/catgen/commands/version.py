"""Command: archive the latest version of a resource."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from catgen.commands._base import CatCommand
from catgen.domain.types import ResourceKind

if TYPE_CHECKING:
    from catgen.commands._context import AppContext


@click.command(
    cls=CatCommand,
    examples="""\
  catgen version event order-created
  catgen --json version domain orders""",
)
@click.argument(
    "kind",
    type=click.Choice([k.value for k in ResourceKind], case_sensitive=False),
    metavar="KIND",
)
@click.argument("resource_id")
@click.pass_obj
def version(app: AppContext, kind: str, resource_id: str) -> None:
    """Move the latest version of a resource into versioned/<version>/."""
    from catgen.services.catalog import CatalogService

    app.emit(CatalogService(app.catalog).archive(kind, resource_id))
