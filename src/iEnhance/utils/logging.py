"""Package logger setup for applications embedding iEnhance."""

from __future__ import annotations

import logging
from typing import Optional

PACKAGE_LOGGER = "iEnhance"
_HANDLER_NAME = "iEnhance.stderr"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(level: Optional[str] = None) -> logging.Logger:
    """Return the ``iEnhance`` logger, attaching one stderr handler on first use.

    Module loggers under the package propagate here.  *level* is a level name
    such as ``"DEBUG"``; ``None`` keeps whatever level is already set.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(handler.get_name() == _HANDLER_NAME for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    if level is not None:
        logger.setLevel(level)
    return logger


__all__ = ["PACKAGE_LOGGER", "get_logger"]
