"""
Logging setup - one console handler for the whole "nowcal" logger tree.

Modules create their own loggers with hierarchical names
(e.g. logging.getLogger("nowcal.services.current_event")) and never
configure handlers themselves.
"""

import logging
import sys

from nowcal.core.config import settings


LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | None = None) -> logging.Logger:
    """
    Attach a stdout handler to the root "nowcal" logger.

    Safe to call more than once; the handler is only added the first time.

    Args:
        level: Log level name (defaults to settings.LOG_LEVEL)

    Returns:
        The configured "nowcal" logger
    """
    logger = logging.getLogger("nowcal")
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return logger
