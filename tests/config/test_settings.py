"""Tests for CatgenSettings: unified settings with a TOML source."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from catgen.config.settings import CatgenSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("CATGEN_CONFIG", "CATGEN_CATALOG_ROOT", "PROJECT_DIR"):
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = CatgenSettings.from_cli(catalog_root=tmp_path)
        assert settings.catalog_root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.catalog.document_name == "index.mdx"
        assert settings.catalog.default_message_type == "event"
        assert settings.plugins.enabled is True
        assert settings.generators == {}

    def test_frozen(self, tmp_path: Path) -> None:
        settings = CatgenSettings.from_cli(catalog_root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]

    def test_cli_flags_applied(self, tmp_path: Path) -> None:
        settings = CatgenSettings.from_cli(catalog_root=tmp_path, json_output=True, verbose=True)
        assert settings.json_output is True
        assert settings.verbose is True


class TestTomlSource:
    def test_loads_sections(self, tmp_path: Path) -> None:
        (tmp_path / "catgen.toml").write_text(
            '[catalog]\ndocument_name = "index.md"\ndefault_message_type = "Command"\n'
            "[plugins]\nenabled = false\n"
            '[generators.manifest]\nsource = "catalog.yaml"\ninclude_all_versions = true\n'
        )
        settings = CatgenSettings.from_cli(catalog_root=tmp_path)
        assert settings.config_path == tmp_path / "catgen.toml"
        assert settings.catalog.document_name == "index.md"
        assert settings.catalog.default_message_type == "command"
        assert settings.plugins.enabled is False
        assert settings.plugins.local_dir == ".catgen/plugins"
        assert settings.generator_options("manifest") == {
            "source": "catalog.yaml",
            "include_all_versions": True,
        }

    def test_generator_options_copy(self, tmp_path: Path) -> None:
        (tmp_path / "catgen.toml").write_text('[generators.manifest]\nsource = "a.yaml"\n')
        settings = CatgenSettings.from_cli(catalog_root=tmp_path)
        options = settings.generator_options("manifest")
        options["source"] = "changed"
        assert settings.generator_options("manifest") == {"source": "a.yaml"}
        assert settings.generator_options("unknown") == {}

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "conf" / "my.toml"
        custom.parent.mkdir()
        custom.write_text('[catalog]\ndocument_name = "index.md"\n')
        settings = CatgenSettings.from_cli(config_path=str(custom), catalog_root=tmp_path)
        assert settings.config_path == custom
        assert settings.catalog.document_name == "index.md"

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "catgen.toml").write_text("[catalog\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            CatgenSettings.from_cli(catalog_root=tmp_path)

    def test_invalid_document_name(self, tmp_path: Path) -> None:
        (tmp_path / "catgen.toml").write_text('[catalog]\ndocument_name = "README.md"\n')
        with pytest.raises(ValueError, match="document_name"):
            CatgenSettings.from_cli(catalog_root=tmp_path)


class TestCatalogRoot:
    def test_explicit_root_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CATGEN_CATALOG_ROOT", str(tmp_path / "env"))
        settings = CatgenSettings.from_cli(catalog_root=tmp_path / "flag")
        assert settings.catalog_root == tmp_path / "flag"

    def test_env_root(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CATGEN_CATALOG_ROOT", str(tmp_path / "env"))
        settings = CatgenSettings.from_cli()
        assert settings.catalog_root == tmp_path / "env"

    def test_configured_root_relative_to_config(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "catgen.toml").write_text('[catalog]\nroot = "docs/catalog"\n')
        nested = tmp_path / "src"
        nested.mkdir()
        monkeypatch.chdir(nested)
        settings = CatgenSettings.from_cli()
        assert settings.catalog_root.resolve() == (tmp_path / "docs" / "catalog").resolve()

    def test_project_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PROJECT_DIR", str(tmp_path / "project"))
        settings = CatgenSettings.from_cli()
        assert settings.catalog_root == tmp_path / "project"

    def test_config_directory(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "catgen.toml").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        settings = CatgenSettings.from_cli()
        assert settings.catalog_root.resolve() == tmp_path.resolve()
