"""Logging initialization."""

from __future__ import annotations

import logging

from cloud_asr.config._env import get_bool
from cloud_asr.config.logging import LOG_LEVEL, LOG_FORMAT, SHOW_WEBSOCKETS_LOGS_ENV


def configure_logging(level: str | None = None) -> None:
    # websockets logs every frame at DEBUG. Keep it tame unless explicitly enabled.
    if not get_bool(SHOW_WEBSOCKETS_LOGS_ENV, False):
        logging.getLogger("websockets").setLevel(logging.WARNING)
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)


__all__ = ["configure_logging"]
