"""
Centralized logging utilities for consistent logging configuration across the package
"""

import logging
from typing import Optional, Union

LOGGER_NAMESPACE = "gem_registry"


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger instance

    Args:
        name: Logger name (typically __name__ from calling module)
        level: Optional logging level (defaults to None to use root logger level)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def setup_logging(
    level: Union[int, str] = logging.WARNING,
    format_string: Optional[str] = None,
    debug: bool = False
):
    """
    Configure logging for command line use

    Args:
        level: Logging level, as a number or a name such as "INFO"
        format_string: Custom format string (optional)
        debug: Force DEBUG for the gem_registry loggers
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    if format_string is None:
        format_string = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    logging.basicConfig(
        level=level,
        format=format_string,
        force=True
    )

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    if debug:
        logging.getLogger(LOGGER_NAMESPACE).setLevel(logging.DEBUG)
