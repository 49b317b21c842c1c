"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from catgen.config.logging import configure_logging


class TestConfigureLogging:
    def test_default_level_is_info(self) -> None:
        configure_logging()
        assert logging.getLogger("catgen").level == logging.INFO
        assert logging.getLogger().level == logging.WARNING

    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger("catgen").level == logging.DEBUG

    def test_quiet_sets_warning(self) -> None:
        configure_logging(quiet=True)
        assert logging.getLogger("catgen").level == logging.WARNING

    def test_verbose_beats_quiet(self) -> None:
        configure_logging(verbose=True, quiet=True)
        assert logging.getLogger("catgen").level == logging.DEBUG

    def test_human_mode_output(self) -> None:
        configure_logging(verbose=True, log_json=False)
        log = structlog.get_logger("catgen.test")
        log.warning("hello world", key="val")

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_json=True)
        log = structlog.get_logger("catgen.services.reconcile")
        log.info("resource_written", kind="event", id="order-created")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "resource_written"
        assert parsed["kind"] == "event"
        assert parsed["id"] == "order-created"
        assert parsed["level"] == "info"
        assert parsed["logger"] == "catgen.services.reconcile"
        assert "timestamp" in parsed

    def test_stdlib_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("catgen.plugins.manager").debug("Registered plugin: probe")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Registered plugin: probe"
        assert parsed["level"] == "debug"
        assert parsed["logger"] == "catgen.plugins.manager"

    def test_third_party_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("pluggy").debug("hook noise")
        logging.getLogger("markdown_it").info("parser noise")
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        configure_logging(log_json=False)
        configure_logging(log_json=True)
        assert len(logging.getLogger().handlers) == 1
