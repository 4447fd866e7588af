"""
Console logging for the API and the sync job.

Everything logs through the "rankchallenge" logger; uvicorn's loggers are
pointed at the same handler so request lines and app lines share a format.
"""

import logging
import sys
from datetime import datetime, timezone

LOGGER_NAME = "rankchallenge"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s.%(funcName)s | %(message)s"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


class UTCFormatter(logging.Formatter):
    """Timestamps in UTC regardless of the host timezone."""

    def formatTime(self, record, datefmt=None):
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return created.strftime(datefmt) if datefmt else created.isoformat()


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a stdout handler to the app logger and uvicorn's loggers.

    Safe to call more than once: existing handlers are replaced, not stacked.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(UTCFormatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S.%f"))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers = [handler]

    for name in UVICORN_LOGGERS:
        logging.getLogger(name).handlers = [handler]

    return logger