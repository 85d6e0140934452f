"""Loguru setup, installed through Django's LOGGING_CONFIG hook."""

import logging
import sys

from loguru import logger

log_format = " | ".join(
    (
        "<g>{time:YYYY-MM-DD HH:mm:ss.SSS}</>",
        "<lvl>{level:<8}</>",
        "<c>{name}:{function}:{line}</>",
        "{message}",
    )
)


class InterceptHandler(logging.Handler):
    """Route stdlib records (Django, DRF) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(config: dict) -> None:
    level = config.get("level", "INFO").upper()
    logger.remove()
    logger.add(sys.stdout, format=log_format, level=level, enqueue=config.get("enqueue", True))
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    # Django's DEFAULT_LOGGING gives these their own console handlers
    for name in ("django", "django.server"):
        django_logger = logging.getLogger(name)
        django_logger.handlers.clear()
        django_logger.propagate = True
    for name in config.get("quiet", ()):
        logging.getLogger(name).setLevel(logging.WARNING)
