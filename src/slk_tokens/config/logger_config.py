"""Logger configuration for the token store."""

import sys
from typing import Optional

from loguru import logger

from .settings import StoreSettings, get_settings


def setup_logging(settings: Optional[StoreSettings] = None) -> None:
    """Configure loguru logger for console and optional file output.

    The package logs nothing until this is called: it is disabled on import
    so applications embedding the store opt in explicitly.
    """
    settings = settings or get_settings()

    # Remove default loguru handler
    logger.remove()

    if settings.log_to_console:
        logger.add(
            sink=sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            level=settings.log_level,
            colorize=True,
        )

    if settings.log_to_file:
        logger.add(
            sink=str(settings.log_file_path),
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level=settings.log_level,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            compression="gz",
        )

    logger.enable("slk_tokens")

    if settings.log_to_file:
        logger.info(f"File logging enabled: {settings.log_file_path}")
