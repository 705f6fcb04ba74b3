"""Process-wide logging setup shared by the API entrypoint and CLI scripts."""

import logging

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once; later calls are no-ops (basicConfig semantics)."""
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
