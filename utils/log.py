import sys
from typing import Optional

from loguru import logger


def setup_logging(level: str = "INFO", file: Optional[str] = None) -> None:
    """Replace loguru's default sink with the configured ones"""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan> - <level>{message}</level>",
    )
    if file:
        logger.add(file, level=level, rotation="1 MB", retention=3)
