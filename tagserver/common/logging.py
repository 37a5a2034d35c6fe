# tagserver/common/logging.py
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"
ROOT_LOGGER = "tagserver"


def _as_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: int | str = logging.INFO) -> None:
    """
    Set the level of the `tagserver` logger tree.
    A root handler is installed only when nobody (uvicorn, pytest) has one yet.
    """
    lvl = _as_level(level)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=lvl, format=LOG_FORMAT)
    logging.getLogger(ROOT_LOGGER).setLevel(lvl)


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    return logging.getLogger(name)
