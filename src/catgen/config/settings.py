"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  (CLI flags passed by Click)
  2. Env vars     (``CATGEN_*`` prefix, ``__`` for nesting)
  3. TOML file    (``catgen.toml`` discovered via walk-up)
  4. Code defaults baked into the section models

The catalog root is resolved once here and carried explicitly from then
on: ``--catalog``, ``CATGEN_CATALOG_ROOT``, ``[catalog] root`` (relative
to the config file), ``PROJECT_DIR``, the config file directory, the CWD.
"""

from __future__ import annotations

import os
import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from catgen.config.discovery import find_config
from catgen.config.models import CatalogConfig, PluginsConfig

PROJECT_DIR_ENV_VAR = "PROJECT_DIR"
CATALOG_ROOT_ENV_VAR = "CATGEN_CATALOG_ROOT"


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``catgen.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for the TOML path during construction.
_tls = threading.local()


class CatgenSettings(BaseSettings):
    """Settings for one catgen invocation.

    Attributes:
        catalog_root: Resolved catalog directory.
        config_path: The TOML file in effect, or None.
        generators: ``[generators.<name>]`` option tables.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "CATGEN_",
        "env_nested_delimiter": "__",
    }

    catalog_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    generators: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    def generator_options(self, name: str) -> dict[str, Any]:
        """Option table for generator *name* (empty if unconfigured)."""
        return dict(self.generators.get(name, {}))

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        catalog_root: Path | None = None,
        **cli_flags: Any,
    ) -> CatgenSettings:
        """Construct settings from a CLI invocation.

        Discovers ``catgen.toml`` (or uses *config_path*), resolves the
        catalog root, and applies CLI flags as top-priority overrides.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(catalog_root)

        _tls.toml_path = toml_path
        try:
            settings = cls(config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None

        resolved = _resolve_catalog_root(catalog_root, settings.catalog.root, toml_path)
        return settings.model_copy(update={"catalog_root": resolved})


def _resolve_catalog_root(
    explicit: Path | None,
    configured: Path | None,
    toml_path: Path | None,
) -> Path:
    if explicit is not None:
        return explicit
    env_root = os.environ.get(CATALOG_ROOT_ENV_VAR)
    if env_root:
        return Path(env_root)
    if configured is not None:
        if configured.is_absolute() or toml_path is None:
            return configured
        return toml_path.parent / configured
    project_dir = os.environ.get(PROJECT_DIR_ENV_VAR)
    if project_dir:
        return Path(project_dir)
    if toml_path is not None:
        return toml_path.parent
    return Path.cwd()
