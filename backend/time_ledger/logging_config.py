from __future__ import annotations

import logging

from time_ledger.config import get_settings

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def configure_logging() -> None:
    """Configure root logging from settings. Safe to call more than once."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
