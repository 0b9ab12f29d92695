"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``; this only installs the
root handler and level once at startup.
"""

from __future__ import annotations

import logging

from gramera.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger from settings.LOG_LEVEL (idempotent)."""
    logging.basicConfig(format=LOG_FORMAT, level=level or settings.LOG_LEVEL)
    logging.getLogger("gramera").setLevel(level or settings.LOG_LEVEL)
