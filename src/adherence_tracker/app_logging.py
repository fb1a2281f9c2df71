"""Logging setup for the adherence tracker service."""

import logging

LOGGER_NAME = "adherence_tracker"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Attach one stream handler to the package logger and set its level.

    Safe to call repeatedly; later calls only adjust the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if logger.handlers:
        return logger
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
