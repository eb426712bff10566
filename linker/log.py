"""Logging setup for the ``linker`` logger namespace."""

import logging

__all__ = ["LOGGER_NAME", "setup_logging"]

LOGGER_NAME = "linker"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Attach a stream handler to the ``linker`` logger once."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger
