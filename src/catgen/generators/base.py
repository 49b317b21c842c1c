"""Generator contract: turn a source system into a :class:`DiscoveryBatch`.

Generators only read. Everything they discover is materialized before
reconciliation starts; the catalog is never touched from here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any, ClassVar

from catgen.domain.errors import ConfigurationError
from catgen.domain.models import DiscoveryBatch

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


class Generator(ABC):
    """A source adapter registered through the ``register_generators`` hook."""

    name: ClassVar[str]
    description: ClassVar[str] = ""

    @abstractmethod
    def discover(self, options: Mapping[str, Any], *, catalog_root: Path) -> DiscoveryBatch:
        """Read the source system described by *options*.

        Raises:
            ConfigurationError: If required options are missing or invalid.
        """

    # ------------------------------------------------------------------
    # Option helpers (options may come from TOML or ``--option k=v``)
    # ------------------------------------------------------------------

    def require_option(self, options: Mapping[str, Any], key: str) -> Any:
        value = options.get(key)
        if value is None or value == "":
            msg = f"Generator {self.name!r} requires the {key!r} option"
            raise ConfigurationError(msg)
        return value

    def flag_option(self, options: Mapping[str, Any], key: str, *, default: bool = False) -> bool:
        value = options.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        msg = f"Generator {self.name!r}: option {key!r} must be a boolean, got {value!r}"
        raise ConfigurationError(msg)
