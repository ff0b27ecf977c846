"""Logging setup for the helper and driver trace loggers."""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from .config import DriverDebugLevel, HelperDebugLevel

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

HELPER_LOGGER = "utildb"
DRIVER_LOGGER = "utildb.driver"

# Helper trace is written at INFO, driver trace at DEBUG
HELPER_TRACE_LEVEL = logging.INFO
DRIVER_TRACE_LEVEL = logging.DEBUG


def effective_level(level, helper_debug=None, driver_debug=None) -> int:
    """Lower ``level`` far enough for the enabled traces to reach the handlers."""
    if HelperDebugLevel.parse(helper_debug) is HelperDebugLevel.ON:
        level = min(level, HELPER_TRACE_LEVEL)
    if DriverDebugLevel.parse(driver_debug) is not DriverDebugLevel.OFF:
        level = min(level, DRIVER_TRACE_LEVEL)
    return level


def setup_logging(level=logging.INFO, log_dir: Optional[str] = None,
                  helper_debug=None, driver_debug=None) -> None:
    """Attach a console handler, plus rotating trace files when log_dir is set.

    With log_dir, helper records go to ``utildb.log`` and driver records to
    ``utildb_driver.log`` (5 MB, 3 backups each). Driver records do not
    propagate into the helper file.

    Safe to call multiple times; skips if handlers are already attached.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level = effective_level(level, helper_debug, driver_debug)
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    if not log_dir:
        return

    os.makedirs(log_dir, exist_ok=True)
    for name in (HELPER_LOGGER, DRIVER_LOGGER):
        handler = RotatingFileHandler(
            os.path.join(log_dir, f"{name.replace('.', '_')}.log"),
            maxBytes=5 * 1024 * 1024, backupCount=3,
        )
        handler.setLevel(level)
        handler.setFormatter(formatter)
        if name == HELPER_LOGGER:
            handler.addFilter(lambda record: not record.name.startswith(DRIVER_LOGGER))
        logging.getLogger(name).addHandler(handler)
