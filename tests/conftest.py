"""Shared pytest fixtures and test helpers for catgen tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner

from catgen.domain.models import (
    DiscoveryBatch,
    DomainDescriptor,
    MessageCandidate,
    ServiceDescriptor,
)
from catgen.infrastructure.catalog import Catalog


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo configure_logging() calls made by CLI tests.

    A handler bound to a CliRunner stream must not outlive the test.
    """
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    catgen_logger = logging.getLogger("catgen")
    catgen_level = catgen_logger.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    catgen_logger.setLevel(catgen_level)
    structlog.reset_defaults()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def catalog_root(tmp_path: Path) -> Path:
    """Empty catalog directory."""
    root = tmp_path / "catalog"
    root.mkdir()
    return root


@pytest.fixture
def catalog(catalog_root: Path) -> Catalog:
    """Catalog over an empty temp directory, without plugins."""
    return Catalog(catalog_root)


@pytest.fixture
def _isolated_catalog(catalog_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run the CLI from inside a temp catalog with no ambient config.

    Use via ``@pytest.mark.usefixtures("_isolated_catalog")`` on command
    test classes.
    """
    for var in ("CATGEN_CONFIG", "CATGEN_CATALOG_ROOT", "PROJECT_DIR"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(catalog_root)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def candidate(name: str, version: str = "1.0.0", **kwargs: Any) -> MessageCandidate:
    """A message candidate with a small JSON schema payload."""
    kwargs.setdefault("file_name", f"{name}.json")
    kwargs.setdefault("schema", f'{{"title": "{name}", "version": "{version}"}}'.encode())
    return MessageCandidate(name=name, version=version, **kwargs)


def orders_batch(
    *,
    domain_version: str = "0.0.1",
    service_version: str = "1.0.0",
    message_version: str = "1.0.0",
    sends: list[Any] | None = None,
) -> DiscoveryBatch:
    """The orders scenario: one domain, one service sending ``order-*``."""
    return DiscoveryBatch(
        generator="test",
        domain=DomainDescriptor(id="orders", version=domain_version),
        services=[
            ServiceDescriptor(
                id="Orders Service",
                version=service_version,
                sends=sends if sends is not None else [{"prefix": "order-"}],
            )
        ],
        candidates=[
            candidate("order-created", message_version),
            candidate("inventory-updated", "2.0.0"),
        ],
    )
