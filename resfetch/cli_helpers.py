"""Shared CLI helpers for resfetch commands."""

import sys
from pathlib import Path
from typing import Optional

from .constants import ExitCodes
from .errors import (
    ArchiveFormatError,
    ConfigurationError,
    CorruptedRegistryError,
    ExtractionError,
    PathTraversalError,
    PipelineError,
    RetrievalError,
    StagingError,
    UnsupportedFormatError,
)
from .registry import ResourceDatabase


def exit_with_error(message: str, exit_code: int) -> None:
    """Print an error message and exit with the specified code."""
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(exit_code)


def map_exception_to_exit_code(exc: BaseException) -> Optional[int]:
    """Translate known exceptions to resfetch exit codes.

    Pipeline failures are classified by the stage error they wrap.
    """
    if isinstance(exc, PipelineError) and exc.cause is not None:
        return map_exception_to_exit_code(exc.cause) or ExitCodes.FETCH_FAILED
    if isinstance(exc, ConfigurationError):
        return ExitCodes.CONFIGURATION_ERROR
    if isinstance(exc, RetrievalError):
        return ExitCodes.RETRIEVAL_ERROR
    if isinstance(exc, (UnsupportedFormatError, ArchiveFormatError)):
        return ExitCodes.FORMAT_ERROR
    if isinstance(exc, PathTraversalError):
        return ExitCodes.SECURITY_ERROR
    if isinstance(exc, ExtractionError):
        return ExitCodes.EXTRACTION_ERROR
    if isinstance(exc, StagingError):
        return ExitCodes.STAGING_ERROR
    if isinstance(exc, CorruptedRegistryError):
        return ExitCodes.CORRUPTED_REGISTRY
    if isinstance(exc, PipelineError):
        return ExitCodes.FETCH_FAILED
    return None


def add_request_arguments(parser) -> None:
    """Add the options shared by every command that runs the pipeline."""
    parser.add_argument('--url', help='Archive URL (default: $RESFETCH_URL)')
    parser.add_argument('--no-extract', dest='extract', action='store_false', default=None,
                        help='Stage the downloaded file as-is instead of unpacking it')
    parser.add_argument('--skip', dest='skip', action='store_true', default=None,
                        help='Do nothing and report the run as skipped')
    parser.add_argument('--destination', help='Directory to publish into (default: $RESFETCH_DESTINATION)')
    parser.add_argument('--registry', help='Resource registry JSON file (default: $RESFETCH_REGISTRY_PATH)')


def resolve_run_arguments(args, settings):
    """Return ``(request, destination, registry)`` for parsed CLI arguments."""
    request = settings.to_request(url=args.url, extract=args.extract, skip=args.skip)
    destination = Path(args.destination) if args.destination else settings.destination()
    registry_path = Path(args.registry) if args.registry else settings.registry_path()
    return request, destination, ResourceDatabase(registry_path)
