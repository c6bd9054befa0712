"""Logging setup shared by the upload server and the CLI."""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# httpx logs one INFO line per request, which would interleave with the
# CLI progress line on every chunk.
NOISY_LOGGERS = ('httpx', 'httpcore')


def _resolve_level(log_level: Optional[str]) -> int:
    name = (log_level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(component_name: str, log_level: Optional[str] = None) -> logging.Logger:
    """
    Configure the logger of one top-level package ('server' or 'cli').

    Module loggers such as ``server.finalizer`` propagate into it. Calling
    this again only changes the level.

    Args:
        component_name: Name of the top-level package
        log_level: Level name; defaults to the LOG_LEVEL env var, then INFO

    Returns:
        The component logger
    """
    level = _resolve_level(log_level)
    component_logger = logging.getLogger(component_name)
    component_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    if not component_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        component_logger.addHandler(handler)
        component_logger.propagate = False

    for handler in component_logger.handlers:
        handler.setLevel(level)

    return component_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
