"""
Tests for crop_forecaster.utils.logging.
"""

from __future__ import annotations

import json
import logging
import sys

import pytest

from crop_forecaster.config import LoggingConfig
from crop_forecaster.utils.logging import _JsonFormatter, configure_logging


pytestmark = pytest.mark.usefixtures("restore_root_logger")


def _record(msg: str = "trained %s", *args, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "crop_forecaster.ml.predictor", logging.INFO, __file__, 1, msg, args or ("wheat",), None
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_fields():
    payload = json.loads(_JsonFormatter().format(_record()))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "crop_forecaster.ml.predictor"
    assert payload["msg"] == "trained wheat"
    assert payload["ts"].endswith("Z")


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record()
        record.exc_info = sys.exc_info()
    payload = json.loads(_JsonFormatter().format(record))
    assert "RuntimeError: boom" in payload["exc"]


def test_configure_logging_uses_stderr():
    configure_logging(LoggingConfig(level="INFO"))
    (handler,) = logging.getLogger().handlers
    assert handler.stream is sys.stderr


def test_configure_logging_sets_level():
    configure_logging(LoggingConfig(level="WARNING"))
    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("sklearn").level == logging.WARNING


def test_configure_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "forecaster.log"
    configure_logging(LoggingConfig(level="INFO", log_file=str(log_file), json_format=True))
    logging.getLogger("crop_forecaster.test").info("hello %s", "file")
    for handler in logging.getLogger().handlers:
        handler.flush()
    line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
    assert json.loads(line)["msg"] == "hello file"
