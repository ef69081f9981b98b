"""Logging setup shared by the HTTP service and the CLI."""
from __future__ import annotations
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send claims_mapper log records to stderr at the given level.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ...); unknown names fall back to INFO
    """
    resolved = logging.getLevelName((level or "INFO").upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    logger = logging.getLogger("claims_mapper")
    logger.setLevel(resolved)

    if not any(getattr(h, "_claims_mapper", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._claims_mapper = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
