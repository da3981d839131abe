"""Logging setup for resfetch.

Each pipeline stage (retriever, archive_utils, stager, pipeline, scheduler)
takes an optional ``logger`` argument so a host build tool can hand in its
own logger. Without one, a stage logs under ``resfetch.<module>``.
The CLI calls :func:`configure_logging` once at start-up; library users are
expected to configure logging themselves.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

LOG_LEVEL_ENV = "RESFETCH_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _parse_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    name = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").strip().upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: str | int | None = None, *, force: bool = False) -> None:
    """Configure the root logger.

    ``level`` wins over ``RESFETCH_LOG_LEVEL``; unknown names fall back to
    ``INFO``.
    """
    logging.basicConfig(
        level=_parse_level(level),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        force=force,
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or "resfetch")


def stage_logger(injected: Optional[logging.Logger], module: str) -> logging.Logger:
    """Return the caller-supplied logger, or the module's own logger."""
    return injected if injected is not None else get_logger(module)


__all__ = ["configure_logging", "get_logger", "stage_logger"]
