"""Tests for PluginManager: built-ins, generator lookup, and dispatch."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pluggy
import pytest

from catgen.domain.models import DiscoveryBatch
from catgen.generators.base import Generator
from catgen.generators.manifest import ManifestGenerator
from catgen.plugins.manager import BUILTIN_PLUGIN_NAME, PluginManager

hookimpl = pluggy.HookimplMarker("catgen")


class _StaticGenerator(Generator):
    name = "static"
    description = "Returns an empty batch"

    def discover(self, options: Mapping[str, Any], *, catalog_root: Path) -> DiscoveryBatch:
        return DiscoveryBatch(generator=self.name)


class _StaticPlugin:
    @hookimpl
    def register_generators(self) -> dict[str, Generator]:
        return {"static": _StaticGenerator()}


class _ShadowingPlugin:
    @hookimpl
    def register_generators(self) -> dict[str, Generator]:
        return {"manifest": _StaticGenerator()}


class _BrokenGeneratorsPlugin:
    @hookimpl
    def register_generators(self) -> dict[str, Generator]:
        raise RuntimeError("no generators today")


class _ListPlugin:
    @hookimpl
    def register_generators(self) -> Any:
        return [_StaticGenerator()]


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    @hookimpl
    def post_reconcile(self, generator: str, stats: dict[str, Any]) -> None:
        self.calls.append({"generator": generator, "stats": stats})


class TestBuiltins:
    def test_discover_registers_builtins(self) -> None:
        pm = PluginManager()
        names = pm.discover_and_load()
        assert BUILTIN_PLUGIN_NAME in names
        assert pm.is_loaded

    def test_register_builtins_is_idempotent(self) -> None:
        pm = PluginManager()
        pm.register_builtins()
        pm.register_builtins()
        assert pm.list_plugin_names().count(BUILTIN_PLUGIN_NAME) == 1

    def test_manifest_generator_available(self) -> None:
        pm = PluginManager()
        pm.register_builtins()
        generators = pm.generators()
        assert isinstance(generators["manifest"], ManifestGenerator)


class TestGenerators:
    def test_plugin_generators_collected(self) -> None:
        pm = PluginManager()
        pm.register_builtins()
        pm.register_plugin(_StaticPlugin())
        assert sorted(pm.generators()) == ["manifest", "static"]

    def test_first_registration_wins(self) -> None:
        pm = PluginManager()
        pm.register_builtins()
        pm.register_plugin(_ShadowingPlugin())
        assert isinstance(pm.generators()["manifest"], ManifestGenerator)

    def test_broken_plugin_skipped(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_BrokenGeneratorsPlugin())
        pm.register_plugin(_StaticPlugin())
        assert list(pm.generators()) == ["static"]

    def test_non_dict_registration_ignored(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_ListPlugin())
        assert pm.generators() == {}


class TestDispatch:
    def test_dispatch_calls_hook(self) -> None:
        pm = PluginManager()
        recorder = _Recorder()
        pm.register_plugin(recorder)
        pm.dispatch("post_reconcile", {"generator": "manifest", "stats": {"written": 2}})
        assert recorder.calls == [{"generator": "manifest", "stats": {"written": 2}}]

    def test_dispatch_without_implementations(self) -> None:
        pm = PluginManager()
        pm.dispatch(
            "post_archive",
            {"kind": "event", "resource_id": "a", "version": "1", "path": "x"},
        )

    def test_dispatch_propagates_plugin_errors(self) -> None:
        class _Failing:
            @hookimpl
            def post_reconcile(self, generator: str, stats: dict[str, Any]) -> None:
                raise ValueError("bad plugin")

        pm = PluginManager()
        pm.register_plugin(_Failing())
        with pytest.raises(ValueError, match="bad plugin"):
            pm.dispatch("post_reconcile", {"generator": "g", "stats": {}})

    def test_unregister(self) -> None:
        pm = PluginManager()
        recorder = _Recorder()
        pm.register_plugin(recorder)
        pm.unregister(recorder)
        pm.dispatch("post_reconcile", {"generator": "g", "stats": {}})
        assert recorder.calls == []
