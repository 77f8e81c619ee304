"""Logging setup shared by the service and the load generator."""

import logging
from typing import Any

from .settings import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# httpx logs every request at INFO; the load generator records its own samples.
NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once, at ``level`` or the settings level."""

    level = level or get_settings().log_level
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)

    quiet = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)


def get_logger(name: str) -> logging.Logger:
    """Helper for retrieving configured loggers."""

    configure_logging()
    return logging.getLogger(name)


def log_structured(logger: logging.Logger, message: str, **context: Any) -> None:
    """Uniform structured log helper emitting ``key=value`` pairs."""

    extras = " ".join(f"{key}={value}" for key, value in context.items())
    logger.info("%s %s", message, extras)
