"""Tests for cinescript.logging module."""

from __future__ import annotations

import logging

from cinescript.logging import NOISY_LOGGERS, configure_logging, logger


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True)
        assert logger.level == logging.DEBUG
        assert logging.getLogger("cinescript.session").getEffectiveLevel() == logging.DEBUG

    def test_default_shows_warnings_only(self) -> None:
        configure_logging()
        assert logger.level == logging.WARNING
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
