"""
Tests for settings and logging setup.
"""

import json
import logging

import pytest

from surveydoc.config import Settings, get_settings
from surveydoc.logging_config import JSONFormatter, setup_logging


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("SURVEYDOC_LOG_LEVEL", "SURVEYDOC_LOG_JSON", "SURVEYDOC_LEVEL2_LEGACY_FALLBACK"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings.from_env()
        assert settings == Settings(log_level="INFO", log_json=False, level2_legacy_fallback=True)

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("SURVEYDOC_LOG_LEVEL", "debug")
        monkeypatch.setenv("SURVEYDOC_LOG_JSON", "yes")
        monkeypatch.setenv("SURVEYDOC_LEVEL2_LEGACY_FALLBACK", "0")
        settings = get_settings()
        assert settings.log_level == "DEBUG"
        assert settings.log_json is True
        assert settings.level2_legacy_fallback is False

    def test_blank_flag_uses_default(self, monkeypatch):
        monkeypatch.setenv("SURVEYDOC_LEVEL2_LEGACY_FALLBACK", "")
        assert Settings.from_env().level2_legacy_fallback is True

    def test_cached(self):
        assert get_settings() is get_settings()


class TestLogging:

    def test_setup_logging_configures_package_logger(self):
        logger = setup_logging(level="WARNING", json_output=False)
        assert logger.name == "surveydoc"
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_setup_logging_json(self):
        logger = setup_logging(level="INFO", json_output=True)
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_json_formatter(self):
        record = logging.LogRecord(
            name="surveydoc.tree", level=logging.INFO, pathname=__file__, lineno=10,
            msg="Added %s", args=("i1",), exc_info=None,
        )
        record.inspection_id = "i1"
        entry = json.loads(JSONFormatter().format(record))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "surveydoc.tree"
        assert entry["message"] == "Added i1"
        assert entry["inspection_id"] == "i1"
