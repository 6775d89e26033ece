"""Tests for logging configuration (logging_config.py)."""
from __future__ import annotations

import json
import logging
import sys

import pytest

from dockwatch.logging_config import (
    DockwatchJSONFormatter,
    DockwatchTextFormatter,
    setup_logging,
)


def make_record(msg: str = "hello", level: int = logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="dockwatch.test",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for DockwatchJSONFormatter."""

    def test_basic_fields(self):
        output = json.loads(DockwatchJSONFormatter("agent-1").format(make_record()))

        assert output["level"] == "INFO"
        assert output["logger"] == "dockwatch.test"
        assert output["message"] == "hello"
        assert output["service"] == "dockwatch"
        assert output["agent_id"] == "agent-1"
        assert "timestamp" in output

    def test_no_agent_id(self):
        output = json.loads(DockwatchJSONFormatter().format(make_record()))

        assert "agent_id" not in output

    def test_extra_fields(self):
        record = make_record(container_id="abc", retry_in=1.5, obj=object())

        output = json.loads(DockwatchJSONFormatter().format(record))

        assert output["extra"]["container_id"] == "abc"
        assert output["extra"]["retry_in"] == 1.5
        assert output["extra"]["obj"].startswith("<object object")

    def test_exception_included(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = make_record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        output = json.loads(DockwatchJSONFormatter().format(record))

        assert "ValueError: bad" in output["exception"]


class TestTextFormatter:
    """Tests for DockwatchTextFormatter."""

    def test_format(self):
        output = DockwatchTextFormatter("agent-123456789").format(make_record())

        assert "INFO" in output
        assert "[agent-12]" in output
        assert "dockwatch.test: hello" in output


class TestSetupLogging:
    """Tests for setup_logging()."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers = root.handlers[:]
        level = root.level
        yield
        root.handlers = handlers
        root.setLevel(level)

    def test_json_format(self, monkeypatch):
        from dockwatch.logging_config import settings

        monkeypatch.setattr(settings, "log_format", "json")
        monkeypatch.setattr(settings, "log_level", "DEBUG")

        setup_logging("agent-1")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, DockwatchJSONFormatter)

    def test_text_format(self, monkeypatch):
        from dockwatch.logging_config import settings

        monkeypatch.setattr(settings, "log_format", "text")
        monkeypatch.setattr(settings, "log_level", "warning")

        setup_logging()

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, DockwatchTextFormatter)

    def test_quiets_third_party_loggers(self):
        setup_logging()

        assert logging.getLogger("docker").level == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING
