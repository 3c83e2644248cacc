"""Central logging configuration for notion_clipper.

Provides a single configure_logging function used by the CLI. Safe to call
multiple times; only configures root handlers once.
"""
from __future__ import annotations

import logging
import os

# Include filename:lineno for easier debugging
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(filename)s:%(lineno)d - %(message)s"


def _base_level() -> int:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def configure_logging(verbose: bool | None = None) -> None:
    """Configure the root logger once and optionally adjust level.

    The first call configures basicConfig with a single stream handler.
    Subsequent calls only adjust the level when ``verbose`` is explicitly
    provided.

    Args:
        verbose: If True force DEBUG level. If False, set level from ``LOG_LEVEL``
            environment variable (default INFO). If None, only configure the
            logger on the first call and leave existing level unchanged.
    """
    root = logging.getLogger()
    if not root.handlers:
        level = logging.DEBUG if verbose is True else _base_level()
        logging.basicConfig(level=level, format=DEFAULT_FORMAT)
        return
    if verbose is True:
        root.setLevel(logging.DEBUG)
    elif verbose is False:
        root.setLevel(_base_level())
