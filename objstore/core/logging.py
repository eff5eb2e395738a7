"""Logging configuration."""

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure process logging.

    The level comes from ``level`` or ``LOG_LEVEL`` (default ``INFO``).
    urllib3 connection-pool chatter is held at WARNING unless DEBUG is asked for.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if level != "DEBUG":
        logging.getLogger("urllib3").setLevel(logging.WARNING)
