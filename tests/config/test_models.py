"""Tests for the config section models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from catgen.config.models import CatalogConfig, PluginsConfig


class TestCatalogConfig:
    def test_defaults(self) -> None:
        cfg = CatalogConfig()
        assert cfg.root is None
        assert cfg.document_name == "index.mdx"
        assert cfg.default_message_type == "event"

    def test_markdown_document_name(self) -> None:
        assert CatalogConfig(document_name="index.md").document_name == "index.md"

    def test_rejects_other_document_names(self) -> None:
        with pytest.raises(ValidationError):
            CatalogConfig(document_name="README.md")

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("query", "query"), ("COMMAND", "command"), ("domain", "event"), ("", "event")],
    )
    def test_message_type_normalized(self, value: str, expected: str) -> None:
        assert CatalogConfig(default_message_type=value).default_message_type == expected

    def test_frozen(self) -> None:
        cfg = CatalogConfig()
        with pytest.raises(ValidationError):
            cfg.document_name = "index.md"  # type: ignore[misc]


class TestPluginsConfig:
    def test_defaults(self) -> None:
        cfg = PluginsConfig()
        assert cfg.enabled is True
        assert cfg.local_dir == ".catgen/plugins"
