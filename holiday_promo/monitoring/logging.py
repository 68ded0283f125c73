"""Logging configuration shared by the API process and the Celery worker."""

from __future__ import annotations

import logging

from holiday_promo.config.settings import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Client libraries that log every outbound request at INFO; the worker's own
# job log lines already cover each download and upload.
CHATTY_LOGGERS = ("httpx", "httpcore", "replicate")


def configure_logging() -> None:
    """Configure the root logger from ``LOG_LEVEL`` and quiet HTTP client chatter."""

    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
