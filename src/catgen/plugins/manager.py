"""Plugin discovery and loading.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus local directory discovery from ``.catgen/plugins/``. The built-in
generators are always registered.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pluggy

from catgen.plugins.hookspecs import CatgenHookSpec

if TYPE_CHECKING:
    from catgen.generators.base import Generator

PROJECT_NAME = "catgen"
ENTRY_POINT_GROUP = "catgen.plugins"
BUILTIN_PLUGIN_NAME = "catgen-builtin-generators"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, generator lookup, and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(CatgenHookSpec)
        self._loaded: bool = False

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Register built-ins, entry-point plugins, and *local_dir* plugins.

        Returns the names of all registered plugins.
        """
        self.register_builtins()
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        if local_dir is not None:
            self._discover_local(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_builtins(self) -> None:
        """Register the built-in generators plugin (idempotent)."""
        if self._pm.has_plugin(BUILTIN_PLUGIN_NAME):
            return
        from catgen.plugins.builtins.generators import BuiltinGeneratorsPlugin

        self.register_plugin(BuiltinGeneratorsPlugin(), name=BUILTIN_PLUGIN_NAME)

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        """Access the hook relay for dispatching events."""
        return self._pm.hook

    def list_plugin_names(self) -> list[str]:
        return [name for name, _plugin in self._pm.list_name_plugin()]

    # ------------------------------------------------------------------
    # Generators
    # ------------------------------------------------------------------

    def generators(self) -> dict[str, Generator]:
        """Collect generators from every plugin.

        A plugin whose hook raises or returns a non-dict is skipped with
        a warning. On name clashes the first registration wins.
        """
        collected: dict[str, Generator] = {}
        for plugin_name, plugin in self._pm.list_name_plugin():
            if plugin is None:
                continue
            for name, generator in self._plugin_generators(plugin, plugin_name).items():
                if name in collected:
                    logger.warning(
                        "Generator %r from plugin %s shadowed by an earlier registration",
                        name,
                        plugin_name,
                    )
                    continue
                collected[name] = generator
        return collected

    @staticmethod
    def _plugin_generators(plugin: object, plugin_name: str) -> dict[str, Generator]:
        hook = getattr(plugin, "register_generators", None)
        if hook is None:
            return {}
        try:
            generator_map = hook()
        except Exception:
            logger.warning(
                "Failed to collect generators from plugin %s", plugin_name, exc_info=True
            )
            return {}
        if generator_map is None:
            return {}
        if not isinstance(generator_map, dict):
            logger.warning("Plugin %s returned non-dict generator registrations", plugin_name)
            return {}
        return {str(name): gen for name, gen in generator_map.items()}

    # ------------------------------------------------------------------
    # Lifecycle dispatch
    # ------------------------------------------------------------------

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> None:
        """Call *hook_name* on every plugin, synchronously.

        Exceptions propagate; callers turn them into warnings.
        """
        hook = getattr(self._pm.hook, hook_name)
        hook(**payload)

    # ------------------------------------------------------------------
    # Local directory discovery
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Load single-file plugins from *local_dir*.

        Each ``*.py`` file (excluding ``_``-prefixed names) is imported;
        classes defined in it that carry hookimpl-decorated methods are
        instantiated and registered. A broken local plugin is logged and
        skipped.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"catgen_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name:
                    continue
                if not self._has_hook_impls(obj):
                    continue
                try:
                    self.register_plugin(obj(), name=f"{module_name}.{obj.__name__}")
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instances.

        Entry-point loading may register a class; hooks called on a class
        leave ``self`` unbound.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin) or not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s", plugin_name, exc_info=True
                )
                continue
            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """True if *cls* has a method decorated with ``@hookimpl``.

        ``HookimplMarker("catgen")`` sets a ``catgen_impl`` attribute.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "catgen_impl", None):
                return True
        return False
