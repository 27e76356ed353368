"""
Tests for logging configuration — level resolution and handlers.
"""

import logging
from pathlib import Path

import pytest

from mcfg.core.observability.logging_config import resolve_level, setup_logging


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    def test_precedence(self):
        assert resolve_level(debug=True, verbose=True, quiet=True) == "DEBUG"
        assert resolve_level(verbose=True, quiet=True) == "INFO"
        assert resolve_level(quiet=True, env_level="DEBUG") == "ERROR"
        assert resolve_level(env_level="INFO") == "INFO"
        assert resolve_level() == "WARNING"


class TestSetupLogging:
    def test_console_only(self, restore_root):
        setup_logging("INFO")
        assert len(restore_root.handlers) == 1
        assert restore_root.level == logging.INFO

    def test_unknown_level_is_warning(self, restore_root):
        setup_logging("chatty")
        assert restore_root.level == logging.WARNING

    def test_file_handler_lowers_root_level(self, restore_root, tmp_path: Path):
        log_file = tmp_path / "mcfg.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")

        assert restore_root.level == logging.DEBUG
        logging.getLogger("mcfg.test").debug("to the file only")
        for handler in restore_root.handlers:
            handler.flush()
        assert "to the file only" in log_file.read_text()
