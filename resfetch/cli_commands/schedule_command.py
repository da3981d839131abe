"""Scheduled refresh command handling for the resfetch CLI."""

import argparse

from resfetch.cli_helpers import (
    add_request_arguments,
    exit_with_error,
    map_exception_to_exit_code,
    resolve_run_arguments,
)
from resfetch.config import FetchSettings
from resfetch.constants import ExitCodes
from resfetch.errors import ConfigurationError, ResfetchError
from resfetch.scheduler import CronSchedule, run_scheduler


class ScheduleCommand:
    """Re-runs the pipeline on a cron schedule until interrupted."""

    @staticmethod
    def add_parser(subparsers) -> None:
        parser = subparsers.add_parser(
            'schedule',
            help='Refresh resources on a cron schedule (default: $RESFETCH_SCHEDULE_CRON)',
        )
        parser.add_argument('--cron', help='Cron expression, e.g. "0 4 * * *"')
        parser.add_argument('--max-runs', type=int, default=None, help=argparse.SUPPRESS)
        add_request_arguments(parser)
        parser.set_defaults(func=ScheduleCommand.execute)

    @staticmethod
    def execute(args) -> None:
        settings = FetchSettings()
        expression = (args.cron or settings.schedule_cron()).strip()
        if not expression:
            print("Refresh scheduler disabled (no cron expression provided)")
            return
        try:
            schedule = CronSchedule(expression)
            request, destination, registry = resolve_run_arguments(args, settings)
            if not request.skip and not request.source_url.strip():
                raise ConfigurationError("A source URL must be provided (RESFETCH_URL or --url)")
        except ResfetchError as exc:
            message = f"Configuration error: {exc}" if isinstance(exc, ConfigurationError) else str(exc)
            exit_with_error(message, map_exception_to_exit_code(exc) or ExitCodes.FETCH_FAILED)
            return
        try:
            run_scheduler(schedule, request, destination, registry, max_runs=args.max_runs)
        except KeyboardInterrupt:
            print("Refresh scheduler stopped.")
        except ResfetchError as exc:
            exit_with_error(str(exc), map_exception_to_exit_code(exc) or ExitCodes.FETCH_FAILED)
