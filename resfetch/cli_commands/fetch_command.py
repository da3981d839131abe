"""Fetch command handling for the resfetch CLI."""

from resfetch.cli_helpers import (
    add_request_arguments,
    exit_with_error,
    map_exception_to_exit_code,
    resolve_run_arguments,
)
from resfetch.config import FetchSettings
from resfetch.constants import ExitCodes
from resfetch.errors import ConfigurationError, PipelineError, ResfetchError
from resfetch.pipeline import run


class FetchCommand:
    """Runs the fetch-extract-stage pipeline once."""

    @staticmethod
    def add_parser(subparsers) -> None:
        """Add fetch command parser to subparsers."""
        parser = subparsers.add_parser('fetch', help='Download, unpack and publish a resource archive')
        add_request_arguments(parser)
        parser.set_defaults(func=FetchCommand.execute)

    @staticmethod
    def execute(args) -> None:
        """Execute a single pipeline run."""
        try:
            request, destination, registry = resolve_run_arguments(args, FetchSettings())
            published = run(request, destination, registry)
        except ResfetchError as exc:
            exit_code = map_exception_to_exit_code(exc) or ExitCodes.FETCH_FAILED
            if isinstance(exc, ConfigurationError):
                message = f"Configuration error: {exc}"
            elif isinstance(exc, PipelineError) and exc.cause is not None:
                message = f"{exc.args[0]}: {exc.cause}"
            else:
                message = str(exc)
            exit_with_error(message, exit_code)
            return

        if published is None:
            print("Skipped.")
        else:
            print(f"Published resources to {published}")
