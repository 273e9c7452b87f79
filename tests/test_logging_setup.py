"""Tests for core.logging_setup."""

import logging

import pytest

from core.logging_setup import setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_verbose_sets_debug():
    setup_logging(verbose=True)
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("openai").level == logging.WARNING


def test_level_from_config_string():
    setup_logging(level="warning")
    assert logging.getLogger().level == logging.WARNING


def test_file_only_logging(tmp_path):
    log_file = tmp_path / "logs" / "flashflow.log"
    setup_logging(log_file=str(log_file), console=False)
    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.FileHandler)

    logging.getLogger("core.test").info("written to file")
    handlers[0].flush()
    assert "written to file" in log_file.read_text()
    handlers[0].close()


def test_no_handlers_uses_null_handler():
    setup_logging(console=False)
    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.NullHandler)
