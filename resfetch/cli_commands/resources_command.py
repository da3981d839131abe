"""Resource registry listing for the resfetch CLI."""

from pathlib import Path

from resfetch.cli_helpers import exit_with_error, map_exception_to_exit_code
from resfetch.config import FetchSettings
from resfetch.constants import ExitCodes
from resfetch.errors import CorruptedRegistryError
from resfetch.registry import ResourceDatabase


class ResourcesCommand:
    """Lists resource directories registered by previous runs."""

    @staticmethod
    def add_parser(subparsers) -> None:
        parser = subparsers.add_parser('resources', help='List registered resource directories')
        parser.add_argument('--registry', help='Resource registry JSON file (default: $RESFETCH_REGISTRY_PATH)')
        parser.set_defaults(func=ResourcesCommand.execute)

    @staticmethod
    def execute(args) -> None:
        registry_path = Path(args.registry) if args.registry else FetchSettings().registry_path()
        try:
            directories = ResourceDatabase(registry_path).get_all()
        except CorruptedRegistryError as exc:
            exit_with_error(str(exc), map_exception_to_exit_code(exc) or ExitCodes.CORRUPTED_REGISTRY)
            return

        if not directories:
            print("No resource directories registered.")
            return
        print("Resource directories:")
        for directory in directories:
            print(f"  {directory}")
