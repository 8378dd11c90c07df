"""Mini README: Application-wide logging helpers for fuelrange.

Structure:
    * configure_root_logger - install the shared handler once per process.
    * get_logger - module logger factory used across the package.

Levels may be given as ``logging`` constants or names such as ``"DEBUG"``
so the value from ``FuelRangeSettings.log_level`` can be passed through
unchanged.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

_LOGGER_INITIALISED = False


def configure_root_logger(level: Union[int, str] = logging.INFO) -> None:
    """Attach a stream handler to the root logger unless already done."""

    global _LOGGER_INITIALISED
    root_logger = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO
    if _LOGGER_INITIALISED:
        root_logger.setLevel(level)
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    _LOGGER_INITIALISED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a named logger, configuring the root handler on first use."""

    if not _LOGGER_INITIALISED:
        configure_root_logger()
    return logging.getLogger(name)
