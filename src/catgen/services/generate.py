"""GenerateService: run a registered generator and reconcile its batch.

Pipeline: LOOKUP -> OPTIONS -> DISCOVER -> RECONCILE -> RESPOND

Options come from ``[generators.<name>]`` in ``catgen.toml``; explicit
overrides (``--option key=value``) win over the file.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from catgen.domain.errors import ConfigurationError
from catgen.services.base import BaseService
from catgen.services.reconcile import ReconcileService
from catgen.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from catgen.config.settings import CatgenSettings
    from catgen.generators.base import Generator
    from catgen.infrastructure.catalog import Catalog

logger = logging.getLogger(__name__)


class GenerateService(BaseService):
    """Bridges generator plugins and the reconciliation service."""

    def __init__(self, catalog: Catalog, settings: CatgenSettings | None = None) -> None:
        super().__init__(catalog)
        self._settings = settings

    def _generators(self) -> dict[str, Generator]:
        plugins = self._catalog.plugins
        if plugins is None:
            from catgen.plugins.manager import PluginManager

            plugins = PluginManager()
            plugins.register_builtins()
            self._catalog.attach_plugins(plugins)
        return plugins.generators()

    def list_generators(self) -> ServiceResult:
        """Names and descriptions of every registered generator."""
        items = [
            {"name": name, "description": generator.description}
            for name, generator in sorted(self._generators().items())
        ]
        return ServiceResult(
            ok=True, op="list_generators", data={"items": items, "count": len(items)}
        )

    def generate(self, name: str, *, overrides: Mapping[str, Any] | None = None) -> ServiceResult:
        """Discover with generator *name*, then reconcile the batch."""
        op = "generate"
        generators = self._generators()
        generator = generators.get(name)
        if generator is None:
            available = ", ".join(sorted(generators)) or "none"
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="UNKNOWN_GENERATOR",
                    message=f"No generator named {name!r} (available: {available})",
                ),
            )

        options: dict[str, Any] = {}
        if self._settings is not None:
            options.update(self._settings.generator_options(name))
        options.update(overrides or {})

        logger.info("Running generator %s", name)
        try:
            batch = generator.discover(options, catalog_root=self._catalog.root)
        except ConfigurationError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="CONFIG_ERROR", message=str(exc), detail={"generator": name}
                ),
            )

        result = ReconcileService(self._catalog).run(batch)
        return result.model_copy(update={"op": op})
