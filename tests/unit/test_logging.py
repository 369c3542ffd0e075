"""Tests for logging helpers."""
import logging

import pytest

from transferpy import setup_logging
from transferpy.core.logging import get_logger


@pytest.fixture(autouse=True)
def restore_levels():
    """Put transferpy logger levels back after each test."""
    names = ['transferpy', 'transferpy.keyring', 'transferpy.upload.coordinator']
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


class TestGetLogger:
    """Test suite for get_logger."""

    def test_returns_named_logger(self):
        logger = get_logger('transferpy.keyring')

        assert logger is logging.getLogger('transferpy.keyring')
        assert logger.propagate

    def test_default_level_without_root_handlers(self, monkeypatch):
        """Test a WARNING default is applied only when nothing is configured."""
        root = logging.getLogger()
        monkeypatch.setattr(root, 'handlers', [])

        logger = get_logger('transferpy.test.unconfigured')

        assert logger.level == logging.WARNING

    def test_keeps_level_with_root_handlers(self, monkeypatch):
        root = logging.getLogger()
        monkeypatch.setattr(root, 'handlers', [logging.NullHandler()])

        logger = get_logger('transferpy.test.configured')

        assert logger.level == logging.NOTSET


class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_sets_levels(self):
        setup_logging(logging.DEBUG)

        assert logging.getLogger('transferpy').level == logging.DEBUG
        assert logging.getLogger('transferpy.keyring').level == logging.DEBUG
        assert logging.getLogger('transferpy.upload.coordinator').level == logging.DEBUG

    def test_messages_reach_root(self, caplog):
        """Test transferpy records propagate to root handlers."""
        setup_logging(logging.INFO)

        with caplog.at_level(logging.INFO):
            get_logger('transferpy.keyring').info("keyring ready")

        assert "keyring ready" in caplog.text
