"""Tests for the loguru logging setup.

Run with: pytest tests/test_logging.py -v
"""

import logging

from django.conf import settings

from config.loguru_config import InterceptHandler, configure_logging


class TestConfigureLogging:
    def test_django_loggers_only_reach_loguru(self):
        configure_logging({**settings.LOGGING, "enqueue": False})

        assert any(isinstance(h, InterceptHandler) for h in logging.getLogger().handlers)
        for name in ("django", "django.server"):
            django_logger = logging.getLogger(name)
            assert django_logger.handlers == []
            assert django_logger.propagate is True

    def test_noisy_loggers_are_quietened(self):
        configure_logging({"level": "DEBUG", "enqueue": False, "quiet": ["django.db.backends"]})

        assert logging.getLogger("django.db.backends").level == logging.WARNING
