"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``catgen.toml`` only holds
overrides. A fresh catalog needs no config file at all.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, field_validator

from catgen.domain.types import message_kind


class CatalogConfig(BaseModel):
    """[catalog] section."""

    model_config = {"frozen": True}

    root: Path | None = None
    document_name: str = "index.mdx"
    default_message_type: str = "event"

    @field_validator("document_name")
    @classmethod
    def check_document_name(cls, value: str) -> str:
        if value not in ("index.mdx", "index.md"):
            msg = f"document_name must be index.mdx or index.md, got {value!r}"
            raise ValueError(msg)
        return value

    @field_validator("default_message_type")
    @classmethod
    def check_message_type(cls, value: str) -> str:
        return str(message_kind(value))


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".catgen/plugins"

