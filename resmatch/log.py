"""Logging setup for the HTTP service."""

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = ["urllib3", "google", "httpx", "httpcore"]


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Console logging for the service; the hosting platform collects stdout."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))

    logger = logging.getLogger("resmatch")
    logger.setLevel(level.upper())
    if not logger.handlers:
        logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
