"""Tests for GenerateService: generator lookup, options, reconcile."""

from __future__ import annotations

from pathlib import Path

import pytest

from catgen.config.settings import CatgenSettings
from catgen.domain.types import ResourceKind
from catgen.infrastructure.catalog import Catalog
from catgen.services.generate import GenerateService

MANIFEST = """\
services:
  - id: billing
    version: 1.0.0
    receives:
      - suffix: -created
messages:
  - id: order-created
    version: 1.0.0
    schemaPath: order-created.json
"""


@pytest.fixture
def manifest(catalog_root: Path) -> Path:
    source = catalog_root / "schemas"
    source.mkdir()
    (source / "order-created.json").write_text('{"type": "object"}')
    path = source / "manifest.yaml"
    path.write_text(MANIFEST)
    return path


@pytest.fixture
def settings(catalog_root: Path, monkeypatch: pytest.MonkeyPatch) -> CatgenSettings:
    for var in ("CATGEN_CONFIG", "CATGEN_CATALOG_ROOT", "PROJECT_DIR"):
        monkeypatch.delenv(var, raising=False)
    (catalog_root / "catgen.toml").write_text(
        '[generators.manifest]\nsource = "schemas/manifest.yaml"\n'
    )
    return CatgenSettings.from_cli(catalog_root=catalog_root)


class TestListGenerators:
    def test_builtins_listed(self, catalog: Catalog) -> None:
        result = GenerateService(catalog).list_generators()
        assert result.ok
        assert result.op == "list_generators"
        assert result.data["count"] == 1
        assert result.data["items"][0]["name"] == "manifest"
        assert catalog.plugins is not None


class TestGenerate:
    @pytest.mark.usefixtures("manifest")
    def test_options_from_settings(self, catalog: Catalog, settings: CatgenSettings) -> None:
        result = GenerateService(catalog, settings).generate("manifest")
        assert result.ok, result.error
        assert result.op == "generate"
        assert result.meta["generator"] == "manifest"
        billing = catalog.repository(ResourceKind.SERVICE).get("billing")
        assert [r.id for r in billing.refs("receives")] == ["order-created"]

    @pytest.mark.usefixtures("manifest")
    def test_overrides_win(self, catalog: Catalog, settings: CatgenSettings) -> None:
        result = GenerateService(catalog, settings).generate(
            "manifest", overrides={"source": "missing.yaml"}
        )
        assert result.error.code == "CONFIG_ERROR"
        assert "missing.yaml" in result.error.message
        assert result.error.detail == {"generator": "manifest"}

    def test_overrides_without_settings(self, catalog: Catalog, manifest: Path) -> None:
        result = GenerateService(catalog).generate("manifest", overrides={"source": str(manifest)})
        assert result.ok
        assert [e["id"] for e in result.data["written"]] == ["billing", "order-created"]

    def test_missing_required_option(self, catalog: Catalog) -> None:
        result = GenerateService(catalog).generate("manifest")
        assert result.error.code == "CONFIG_ERROR"

    def test_unknown_generator(self, catalog: Catalog) -> None:
        result = GenerateService(catalog).generate("asyncapi")
        assert not result.ok
        assert result.error.code == "UNKNOWN_GENERATOR"
        assert "manifest" in result.error.message
