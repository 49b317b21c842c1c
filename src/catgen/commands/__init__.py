"""Subcommand modules for catgen.

register_commands() imports lazily so ``catgen --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register every command on the root CLI group."""
    from catgen.commands.generate import generate
    from catgen.commands.generators import generators
    from catgen.commands.show import show, versions
    from catgen.commands.version import version

    cli.add_command(generate)
    cli.add_command(generators)
    cli.add_command(show)
    cli.add_command(versions)
    cli.add_command(version)
