"""Logging setup for the command-line entry point."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send foodhub's log records to stderr at *level*.

    Idempotent: calling it again only changes the level.
    """
    logger = logging.getLogger("foodhub")
    logger.setLevel(level)
    if not any(getattr(h, "_foodhub", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._foodhub = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    # keep SQLAlchemy's engine chatter out unless explicitly debugging
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if level == "DEBUG" else logging.WARNING
    )
