"""
Logging configuration
"""
import logging
import sys
from organizese.config import get_settings

settings = get_settings()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _level() -> int:
    return logging.DEBUG if settings.DEBUG else logging.INFO


def configure_logging() -> None:
    """Attach a stdout handler to the package logger (idempotent)"""
    package_logger = logging.getLogger("organizese")
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
    package_logger.setLevel(_level())


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance for scripts living outside the package"""
    logger = logging.getLogger(name)

    if not logger.handlers and not name.startswith("organizese"):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    logger.setLevel(_level())
    return logger
