"""Loguru sink setup."""

import sys

from loguru import logger

from story_gateway.config import GatewaySettings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(settings: GatewaySettings) -> None:
    """Replace loguru's default sink with the configured ones."""
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL, format=LOG_FORMAT)
    if settings.LOG_FILE:
        logger.add(
            settings.LOG_FILE,
            level=settings.LOG_LEVEL,
            format=LOG_FORMAT,
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )
    logger.info(f"Logging setup complete (level={settings.LOG_LEVEL})")
