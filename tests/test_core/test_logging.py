"""Tests for logging setup."""

import json
import logging

import pytest

from uhkupdate.core.logging import NOISY_LOGGERS, get_logger, setup_logging
from uhkupdate.core.structlog_logger import StructlogMixin, get_struct_logger


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Test setup_logging."""

    def test_sets_level(self):
        setup_logging(level=logging.INFO)

        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_level_by_name(self):
        setup_logging(level="debug")

        assert logging.getLogger().level == logging.DEBUG

    def test_noisy_loggers_quieted(self):
        setup_logging(level=logging.DEBUG)
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

        setup_logging(level=logging.ERROR)
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.ERROR

    def test_json_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "update.log"
        setup_logging(level=logging.INFO, log_file=log_file)

        get_logger("uhkupdate.test").info("bundle_resolved", version="9.0.0")
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        record = json.loads(lines[-1])
        assert record["event"] == "bundle_resolved"
        assert record["version"] == "9.0.0"
        assert record["level"] == "info"


class TestStructlogMixin:
    """Test the logging mixin."""

    def test_logger_is_cached(self):
        class Service(StructlogMixin):
            service_name = "TestService"

        service = Service()

        assert service.logger is service.logger

    def test_log_error_with_context(self, tmp_path):
        log_file = tmp_path / "errors.log"
        setup_logging(level=logging.INFO, log_file=log_file)

        class Service(StructlogMixin):
            pass

        Service().log_error_with_context("step_failed", ValueError("bad"), step="x")
        for handler in logging.getLogger().handlers:
            handler.flush()

        record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert record["event"] == "step_failed"
        assert record["error"] == "bad"
        assert record["error_type"] == "ValueError"
        assert record["service"] == "Service"
        assert record["step"] == "x"


def test_get_struct_logger_binds():
    logger = get_struct_logger("uhkupdate.test").bind(step="right-flash")
    assert logger is not None
