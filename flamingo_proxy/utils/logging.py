# =============================================
# File: flamingo_proxy/utils/logging.py
# Purpose: Logging configuration (loguru sinks for service logs)
# =============================================
from __future__ import annotations
import os
import sys

from loguru import logger


def configure_logging() -> None:
    """Replace loguru's default sink; optionally add a rotating file sink (LOG_FILE)."""
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logger.remove()
    logger.add(sys.stderr, level=level)
    log_file = os.getenv("LOG_FILE")
    if log_file:
        logger.add(log_file, level=level, rotation="10 MB")
