"""Tests for logging setup."""

from __future__ import annotations

import json
import logging

import pytest

from rollcall.core import logging as rollcall_logging
from rollcall.core.config import AppSettings


@pytest.fixture(autouse=True)
def reset_logging():
    rollcall_logging._CONFIGURED = False
    yield
    rollcall_logging._CONFIGURED = False
    logging.getLogger("rollcall").handlers.clear()


def test_configures_rollcall_logger():
    rollcall_logging.setup_logging(AppSettings(log_level="debug"))
    logger = logging.getLogger("rollcall")
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_idempotent():
    rollcall_logging.setup_logging(AppSettings())
    rollcall_logging.setup_logging(AppSettings(log_level="DEBUG"))
    assert logging.getLogger("rollcall").level == logging.INFO


def test_json_formatter_keeps_unicode():
    formatter = rollcall_logging._JsonFormatter()
    record = logging.LogRecord("rollcall.test", logging.INFO, __file__, 1, "导入 %s", ("名单.csv",), None)
    payload = json.loads(formatter.format(record))
    assert payload["message"] == "导入 名单.csv"
    assert payload["level"] == "INFO"
