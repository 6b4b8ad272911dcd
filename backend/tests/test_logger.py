"""
Tests for logging configuration.

Requires Python 3.11+.
"""

import importlib
from pathlib import Path

import pytest
import structlog

from utils.config import LoggingSettings, Settings

logger_module = importlib.import_module("utils.logger")


@pytest.fixture
def log_file(tmp_path: Path, monkeypatch):
    """Point logging at a file under tmp_path and close it afterwards."""
    path = tmp_path / "arbor.log"
    settings = Settings(logging=LoggingSettings(file_path=path, format="json"))
    monkeypatch.setattr(logger_module, "get_settings", lambda: settings)
    logger_module._open_log_file.cache_clear()
    yield path
    logger_module._open_log_file(path).close()
    logger_module._open_log_file.cache_clear()


class TestConfigureLogging:
    """Test cases for configure_logging."""

    def test_file_opened_once(self, log_file: Path):
        logger_module.configure_logging()
        logger_module.configure_logging()
        logger_module.configure_logging()

        info = logger_module._open_log_file.cache_info()
        assert info.misses == 1
        assert info.currsize == 1

    def test_lines_reach_file(self, log_file: Path):
        logger_module.configure_logging()
        logger_module.configure_logging()

        structlog.get_logger("arbor").info("tree_built", leaves=3)

        content = log_file.read_text(encoding="utf-8")
        assert content.count("tree_built") == 1
        assert '"leaves": 3' in content
