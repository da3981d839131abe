"""Registry for CLI subcommands."""

from .fetch_command import FetchCommand
from .resources_command import ResourcesCommand
from .schedule_command import ScheduleCommand

COMMANDS = (
    FetchCommand,
    ScheduleCommand,
    ResourcesCommand,
)

__all__ = ["COMMANDS", "FetchCommand", "ScheduleCommand", "ResourcesCommand"]
