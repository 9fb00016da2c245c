"""Logging setup shared by the Lambda handler, the console script and the workers."""

import logging
import os
import sys
from typing import Optional

ROOT_LOGGER_NAME = "image-optimizer"

# Worker threads share loggers, so the thread name is part of every structured line
STRUCTURED_FORMAT = (
    "%(asctime)s | %(name)s | %(levelname)-8s | %(threadName)s | "
    "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
)
SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _parse_level(value: str) -> int:
    return getattr(logging, value.upper(), logging.INFO)


def _build_handler(format_type: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if os.getenv("LOG_FORMAT", format_type).lower() == "structured":
        handler.setFormatter(logging.Formatter(STRUCTURED_FORMAT, datefmt=DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
    return handler


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Return the named logger, attaching a stdout handler the first time.

    Args:
        name: Logger name; ``image-optimizer.*`` loggers inherit the package level
        level: Level name that overrides whatever the logger had
        format_type: "structured" or "simple", unless LOG_FORMAT says otherwise

    Environment Variables:
        LOG_LEVEL: Initial level for top-level loggers (default INFO)
        LOG_FORMAT: "structured" or "simple"
    """
    logger = logging.getLogger(name)
    first_setup = not logger.handlers

    if level:
        logger.setLevel(_parse_level(level))
    elif first_setup and not name.startswith(ROOT_LOGGER_NAME + "."):
        logger.setLevel(_parse_level(os.getenv("LOG_LEVEL", "INFO")))

    if first_setup:
        logger.addHandler(_build_handler(format_type))

    # Own handler per logger; propagating would print every line twice
    logger.propagate = False
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Configured logger for ``name``."""
    return setup_logger(name)


def enable_debug_logging(name: str = ROOT_LOGGER_NAME) -> None:
    """Switch the named logger (and its children) to DEBUG; library loggers are untouched."""
    get_logger(name).setLevel(logging.DEBUG)


logger = setup_logger()
