"""Logging configuration helpers."""

import logging

_FORMAT = "%(levelname)s: %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the package logger.

    Safe to call repeatedly; later calls only adjust the level.
    """
    logger = logging.getLogger("checkin_tracker")
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
