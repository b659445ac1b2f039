"""
Centralized logging configuration using loguru.
"""
from __future__ import annotations

import sys
from typing import Any

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level> | "
    "{extra}"
)


def configure_logging(level: str = "DEBUG", json_logs: bool = False) -> None:
    """
    Replace the loguru sinks with a single stderr sink.

    With ``json_logs`` every record is serialized as one JSON document,
    bound fields included, for log shippers.
    """
    logger.remove()
    if json_logs:
        logger.add(sys.stderr, level=level.upper(), serialize=True)
    else:
        logger.add(sys.stderr, format=LOG_FORMAT, level=level.upper(), colorize=True)


# Remove default handler and add custom one with better format
configure_logging()


def get_logger(name: str = __name__) -> Any:
    """
    Get a logger bound to a specific module name.

    Usage:
        from pokegateway.logging import get_logger
        logger = get_logger(__name__)
        logger.bind(service="poke_api").info("Hello from this module")
    """
    return logger.bind(name=name)
