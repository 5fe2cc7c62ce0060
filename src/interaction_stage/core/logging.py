"""Logging setup for the service process."""

from __future__ import annotations

import logging

from interaction_stage.core.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install a root handler at the configured level.

    Safe to call more than once; an existing root handler is reused.
    """
    resolved = (level or settings.log_level).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger().setLevel(resolved)
    logging.getLogger("interaction_stage").setLevel(resolved)
