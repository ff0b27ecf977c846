"""Tests for logging setup."""
import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import MagicMock, patch

import pytest

from utildb.config import DriverDebugLevel, HelperDebugLevel
from utildb.log_config import DRIVER_LOGGER, HELPER_LOGGER, effective_level, setup_logging


def _fresh_root():
    root = MagicMock()
    root.handlers = []
    return root


class TestEffectiveLevel:
    @pytest.mark.parametrize("helper,driver,expected", [
        (None, None, logging.WARNING),
        ("ON", None, logging.INFO),
        (HelperDebugLevel.OFF, None, logging.WARNING),
        (None, "ROWS", logging.DEBUG),
        ("ON", DriverDebugLevel.QUERIES, logging.DEBUG),
        (None, DriverDebugLevel.OFF, logging.WARNING),
    ])
    def test_lowers_for_enabled_traces(self, helper, driver, expected):
        assert effective_level(logging.WARNING, helper, driver) == expected

    def test_never_raises_level(self):
        assert effective_level(logging.DEBUG, "ON", None) == logging.DEBUG


class TestSetupLogging:
    def test_skips_when_configured(self):
        root = MagicMock()
        root.handlers = [logging.NullHandler()]
        with patch("utildb.log_config.logging.getLogger", return_value=root):
            setup_logging()
        root.addHandler.assert_not_called()

    def test_console_only_without_log_dir(self, tmp_path):
        root = _fresh_root()
        with patch("utildb.log_config.logging.getLogger", return_value=root):
            setup_logging(level=logging.WARNING, helper_debug="ON")
        root.setLevel.assert_called_once_with(logging.INFO)
        handler = root.addHandler.call_args[0][0]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.level == logging.INFO
        assert list(tmp_path.iterdir()) == []

    def test_file_handlers_per_logger(self, tmp_path):
        loggers = {}

        def get_logger(name=None):
            if name is None:
                return root
            return loggers.setdefault(name, MagicMock())

        root = _fresh_root()
        with patch("utildb.log_config.logging.getLogger", side_effect=get_logger):
            setup_logging(log_dir=str(tmp_path / "logs"), driver_debug="QUERIES")

        assert (tmp_path / "logs").is_dir()
        for name in (HELPER_LOGGER, DRIVER_LOGGER):
            handler = loggers[name].addHandler.call_args[0][0]
            assert isinstance(handler, RotatingFileHandler)
            assert handler.level == logging.DEBUG
            assert handler.baseFilename.endswith(f"{name.replace('.', '_')}.log")
            handler.close()

        helper_handler = loggers[HELPER_LOGGER].addHandler.call_args[0][0]
        driver_record = logging.LogRecord(DRIVER_LOGGER, logging.DEBUG, __file__, 1, "row", None, None)
        helper_record = logging.LogRecord(HELPER_LOGGER, logging.INFO, __file__, 1, "SQL", None, None)
        assert not helper_handler.filter(driver_record)
        assert helper_handler.filter(helper_record)
