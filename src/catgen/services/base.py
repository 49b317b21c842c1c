"""BaseService: foundation for catgen services.

Every service receives a :class:`Catalog` at construction time and
reaches the file tree only through its repositories.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from catgen.infrastructure.catalog import Catalog

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class ReconcileService(BaseService):
            def run(self, batch) -> ServiceResult:
                events = self._catalog.repository(ResourceKind.EVENT)
                ...
    """

    def __init__(self, catalog: Catalog) -> None:
        self._catalog = catalog

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Dispatch a lifecycle hook. No-op if plugins are not initialized.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        plugins = self._catalog.plugins
        if plugins is None:
            return
        try:
            plugins.dispatch(hook_name, payload)
        except Exception:
            logger.debug("Hook dispatch failed for %s", hook_name, exc_info=True)
            warnings.append(f"Plugin hook {hook_name} failed")
