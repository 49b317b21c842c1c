"""Pluggy hook specifications for catgen.

One setup-time hook lets plugins contribute generators (source
adapters). Three lifecycle hooks fire synchronously while a
reconciliation run writes to the catalog.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from catgen.generators.base import Generator

hookspec = pluggy.HookspecMarker("catgen")


class CatgenHookSpec:
    """Hook specifications for the catgen plugin system."""

    @hookspec
    def register_generators(self) -> dict[str, Generator] | None:
        """Return name -> Generator mappings available to ``catgen generate``."""

    @hookspec
    def post_write(
        self,
        kind: str,
        resource_id: str,
        version: str,
        path: str,
        action: str,
    ) -> None:
        """Called after a resource document is created, updated, or versioned."""

    @hookspec
    def post_archive(
        self,
        kind: str,
        resource_id: str,
        version: str,
        path: str,
    ) -> None:
        """Called after a latest resource is moved into its archive."""

    @hookspec
    def post_reconcile(self, generator: str, stats: dict[str, Any]) -> None:
        """Called once after a reconciliation run finishes successfully."""
