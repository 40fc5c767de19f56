"""
Logging configuration
"""
from loguru import logger
import os
import sys
from typing import Optional

from tacotrack.config import get_settings

settings = get_settings()

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def setup_logger(level: Optional[str] = None, log_dir: Optional[str] = None):
    """Console sink at the configured level, plus daily app and error files under log_dir."""
    level = (level or settings.log_level).upper()
    log_dir = log_dir or settings.log_dir
    os.makedirs(log_dir, exist_ok=True)

    logger.remove()
    logger.add(sys.stdout, colorize=True, format=CONSOLE_FORMAT, level=level)

    # Everything the service does, kept a month
    logger.add(
        os.path.join(log_dir, "tacotrack_{time:YYYY-MM-DD}.log"),
        rotation="00:00",
        retention="30 days",
        compression="zip",
        level="INFO",
    )
    # Failures only, kept for a quarter
    logger.add(
        os.path.join(log_dir, "errors_{time:YYYY-MM-DD}.log"),
        rotation="00:00",
        retention="90 days",
        level="ERROR",
        backtrace=False,
    )
    return logger


log = setup_logger()
