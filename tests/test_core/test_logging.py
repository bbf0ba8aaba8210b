"""Tests for logging setup."""

import logging
from datetime import date

import pytest

from email_agent.core.logging import configure_logging, log_file_path


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_log_file_path(tmp_path):
    assert log_file_path(tmp_path, date(2024, 1, 15)) == tmp_path / "agent-2024-01-15.log"


def test_console_only():
    configure_logging("debug")
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert not any(isinstance(h, logging.FileHandler) for h in root.handlers)


def test_file_handler_writes_dated_log(tmp_path):
    log_dir = tmp_path / "logs"
    configure_logging("warn", log_dir)

    logging.getLogger("email_agent.test").warning("disk almost full")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert logging.getLogger().level == logging.WARNING
    assert "disk almost full" in log_file_path(log_dir).read_text()


def test_unknown_level_defaults_to_info():
    configure_logging("chatty")
    assert logging.getLogger().level == logging.INFO
