"""Process-wide logging setup."""

from __future__ import annotations

import logging
import sys

from medmesh.core.settings import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Send application logs to stdout at the configured level."""
    logging.basicConfig(
        stream=sys.stdout,
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    if not settings.sql_debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
