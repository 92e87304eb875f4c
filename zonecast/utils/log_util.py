"""
log_util.py: Logger factory shared by every zonecast module.

Usage:
    from zonecast.utils.log_util import app_logger

    logger = app_logger(__name__)
    fetch_logger = app_logger("fetch_logger", log_file="fetch.log")
"""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def app_logger(name: str, log_file: Optional[str] = None, level: Optional[str] = None):
    """
    Create (or fetch) a configured logger.

    :param name: Logger name, usually ``__name__``.
    :param log_file: Optional path; adds a file handler next to the console one.
    :param level: Optional level name. Defaults to the LOG_LEVEL env var or INFO.
    :return: logging.Logger
    """
    logger = logging.getLogger(name)
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    # Streamlit re-runs modules; only attach handlers once per logger
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
