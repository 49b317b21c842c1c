"""Command: list registered generators."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from catgen.commands._base import CatCommand

if TYPE_CHECKING:
    from catgen.commands._context import AppContext


@click.command(
    cls=CatCommand,
    examples="""\
  catgen generators
  catgen --json generators""",
)
@click.pass_obj
def generators(app: AppContext) -> None:
    """List generators contributed by built-ins and plugins."""
    from catgen.services.generate import GenerateService

    app.emit(GenerateService(app.catalog, app.settings).list_generators())
