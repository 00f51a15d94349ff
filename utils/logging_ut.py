"""Process-wide logging setup.

All modules log through children of the ``bazaar`` logger
(``logging.getLogger("bazaar.<area>")``) so a single handler and level
apply to the whole service.
"""

import logging
import sys

from config import get_config

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER_NAME = "bazaar"


def setup_logging() -> logging.Logger:
    cfg = get_config()
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(getattr(logging, cfg["LOG_LEVEL"], logging.INFO))

    ## Repeated calls (tests, reloads) must not stack handlers
    if root_logger.handlers:
        return root_logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    root_logger.addHandler(handler)

    root_logger.debug("Logging initialised at level %s", cfg["LOG_LEVEL"])
    return root_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
