"""Re-run the fetch pipeline on a cron schedule."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from croniter import croniter
from croniter.croniter import CroniterBadCronError

from . import pipeline
from .constants import MAX_SLEEP_INTERVAL_SECONDS
from .errors import ConfigurationError, PipelineError
from .logging_config import stage_logger
from .registry import ResourceRegistry


class CronSchedule:
    """Cron schedule helper backed by :mod:`croniter`."""

    def __init__(self, expression: str) -> None:
        self._expression = expression
        self._validate_expression()

    @property
    def expression(self) -> str:
        return self._expression

    def _validate_expression(self) -> None:
        """Eagerly validate cron syntax so we fail fast on start-up."""

        try:
            croniter(self._expression, datetime.now())
        except CroniterBadCronError as exc:
            raise ConfigurationError(f"Invalid cron expression '{self._expression}': {exc}") from exc

    def next_run(self, reference: datetime) -> datetime:
        """Return the next scheduled time strictly after ``reference``."""

        iterator = croniter(self._expression, reference, ret_type=datetime)
        return iterator.get_next(datetime)


def _wait_until(target: datetime) -> None:
    while True:
        delta = (target - datetime.now()).total_seconds()
        if delta <= 0:
            return
        time.sleep(min(delta, MAX_SLEEP_INTERVAL_SECONDS))


def run_scheduler(
    schedule: CronSchedule,
    request: pipeline.FetchRequest,
    destination: Path,
    registry: Optional[ResourceRegistry] = None,
    *,
    max_runs: Optional[int] = None,
    logger: Optional[logging.Logger] = None,
) -> int:
    """Run the pipeline at every cron tick and return the number of failures.

    A failed run is logged and the loop waits for the next tick; the pipeline
    itself never retries. ``max_runs`` bounds the loop, otherwise it runs
    until interrupted.

    Raises:
        ConfigurationError: the request has no source URL. Checked before
            the first wait so a misconfigured loop never starts.
    """
    log = stage_logger(logger, __name__)
    if not request.skip and not (request.source_url or "").strip():
        raise ConfigurationError("A source URL must be provided (RESFETCH_URL or --url)")
    log.info(
        "Refresh scheduler active (cron='%s', url=%s)",
        schedule.expression,
        request.source_url,
    )

    runs = 0
    failures = 0
    while max_runs is None or runs < max_runs:
        next_run = schedule.next_run(datetime.now())
        log.info("Next scheduled fetch at %s", next_run.strftime("%Y-%m-%d %H:%M"))
        _wait_until(next_run)

        runs += 1
        try:
            pipeline.run(request, destination, registry, logger=log)
        except PipelineError as exc:
            failures += 1
            log.error("Scheduled fetch failed: %s", exc)
    return failures


__all__ = ["CronSchedule", "run_scheduler"]
