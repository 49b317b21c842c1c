"""Catalog: the single dependency injected into every service.

A Catalog owns the catalog root path and hands out one repository per
resource kind. The root is explicit state of this object; nothing in
catgen reads a process-wide "current catalog".
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from catgen.domain.types import ResourceKind, message_kind

if TYPE_CHECKING:
    from catgen.config.settings import CatgenSettings
    from catgen.infrastructure.repositories import ResourceRepository
    from catgen.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class Catalog:
    """File-tree catalog rooted at :attr:`root`.

    Usage::

        catalog = Catalog(Path("./my-catalog"))
        events = catalog.repository(ResourceKind.EVENT)
        latest = events.get("order-created")
    """

    def __init__(
        self,
        root: Path,
        *,
        document_name: str = "index.mdx",
        default_message_type: str = "event",
    ) -> None:
        self._root = root
        self.document_name = document_name
        self.default_message_kind = message_kind(default_message_type)
        self._repositories: dict[ResourceKind, ResourceRepository] = {}
        self._plugins: PluginManager | None = None

    @classmethod
    def from_settings(cls, settings: CatgenSettings) -> Catalog:
        """Build a catalog from resolved settings."""
        return cls(
            settings.catalog_root,
            document_name=settings.catalog.document_name,
            default_message_type=settings.catalog.default_message_type,
        )

    @property
    def root(self) -> Path:
        return self._root

    @property
    def plugins(self) -> PluginManager | None:
        """Plugin manager, or None before :meth:`init_plugins`."""
        return self._plugins

    def init_plugins(self, *, local_dir: Path | None = None) -> list[str]:
        """Discover plugins (entry points plus *local_dir*) and keep the manager."""
        from catgen.plugins.manager import PluginManager

        manager = PluginManager()
        names = manager.discover_and_load(local_dir=local_dir)
        self._plugins = manager
        logger.debug("Plugins loaded: %s", names)
        return names

    def attach_plugins(self, manager: PluginManager) -> None:
        """Use an already configured plugin manager (tests, embedding)."""
        self._plugins = manager

    def repository(self, kind: ResourceKind | str) -> ResourceRepository:
        """Repository for *kind* (one instance per kind per catalog)."""
        from catgen.infrastructure.repositories import repository_for

        resolved = ResourceKind(kind)
        repo = self._repositories.get(resolved)
        if repo is None:
            repo = repository_for(resolved, self)
            self._repositories[resolved] = repo
        return repo
