"""Centralized logger configuration.

Usage:
    from jirareport.utils.logger import get_logger
    logger = get_logger(__name__)

This avoids sprinkling basicConfig calls throughout the codebase.
"""
import logging
import os

DEFAULT_LEVEL = os.getenv("JDR_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = DEFAULT_LEVEL, filename: str = None) -> None:
    """Configure the root logger, replacing any earlier configuration.

    A filename keeps log lines out of the terminal the UI is drawing on.
    """
    kwargs = {}
    if filename:
        kwargs["filename"] = filename
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        force=True,
        **kwargs,
    )


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)
