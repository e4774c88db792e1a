"""CircleCI chat commands.

Each command validates its arguments before any request is made and then
hands off to the CircleCI client.
"""

import logging
from typing import List, Optional

from ..ci_client import FILTERABLE_STATUSES
from .base import BaseCommand, CommandContext

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "master"
ALL_PROJECTS = "all"

STATUS_REQUIRED = "Status can only be failed or success."
BUILD_NUMBER_REQUIRED = "I can't cancel without a build number"


def _is_build_number(token: str) -> bool:
    return token.isdigit()


class StatusCommand(BaseCommand):
    """Show the status of the latest build on a branch."""

    name = "status"
    aliases = ["me"]
    usage = "status <project> [branch]"
    description = "Current status of the latest build (branch defaults to master)"

    def execute(self, args: List[str], context: CommandContext) -> Optional[str]:
        if not args:
            return self.usage_message()

        branch = args[1] if len(args) > 1 else DEFAULT_BRANCH
        return context.ci_client.get_latest_build(args[0], branch)


class LastCommand(BaseCommand):
    """Show the last finished build, skipping one that is still running."""

    name = "last"
    usage = "last <project> [branch]"
    description = "Status of the last finished build (branch defaults to master)"

    def execute(self, args: List[str], context: CommandContext) -> Optional[str]:
        if not args:
            return self.usage_message()

        branch = args[1] if len(args) > 1 else DEFAULT_BRANCH
        return context.ci_client.get_last_build(args[0], branch)


class RetryCommand(BaseCommand):
    """Retry one build, the last build, or every build with a given outcome."""

    name = "retry"
    usage = "retry <project|all> <build_num|last|success|failed>"
    description = "Retry a build, the latest build, or all projects whose last build has a status"

    def execute(self, args: List[str], context: CommandContext) -> Optional[str]:
        """Handle ``retry`` in its three forms.

        ``retry all <status>`` fans out one retry per matching project and
        replies once per retry, so it returns None.

        Args:
            args: ``[project, target]``
            context: Command execution context

        Returns:
            Response message, or None for the fan-out form
        """
        if len(args) < 2:
            return self.usage_message()

        project, target = args[0], args[1].lower()

        if project.lower() == ALL_PROJECTS:
            if target not in FILTERABLE_STATUSES:
                return STATUS_REQUIRED
            logger.info(f"Retrying all projects with status {target}")
            context.ci_client.retry_all_by_status(target, context.reply)
            return None

        if target == "last":
            return context.ci_client.retry_last_build(project)

        if not _is_build_number(target):
            return "Build number must be a number or 'last'"

        return context.ci_client.retry_build(project, target)


class ListCommand(BaseCommand):
    """List projects whose latest build has a given outcome."""

    name = "list"
    usage = "list <success|failed>"
    description = "List projects whose last build has the given status"

    def execute(self, args: List[str], context: CommandContext) -> Optional[str]:
        status = args[0].lower() if args else ""
        if status not in FILTERABLE_STATUSES:
            return STATUS_REQUIRED
        return context.ci_client.list_projects_by_status(status)


class CancelCommand(BaseCommand):
    """Cancel a running build."""

    name = "cancel"
    usage = "cancel <project> <build_num>"
    description = "Cancel a running build"

    def execute(self, args: List[str], context: CommandContext) -> Optional[str]:
        if not args:
            return self.usage_message()
        if len(args) < 2:
            return BUILD_NUMBER_REQUIRED
        if not _is_build_number(args[1]):
            return "Build number must be a number"

        return context.ci_client.cancel_build(args[0], args[1])


class ClearCommand(BaseCommand):
    """Clear the build cache of one project or of all projects."""

    name = "clear"
    usage = "clear <project|all>"
    description = "Clear the build cache of a project, or of every project"

    def execute(self, args: List[str], context: CommandContext) -> Optional[str]:
        if not args:
            return self.usage_message()

        if args[0].lower() == ALL_PROJECTS:
            logger.info("Clearing build caches for all projects")
            context.ci_client.clear_all_caches(context.reply)
            return None

        return context.ci_client.clear_cache(args[0])


class HelpCommand(BaseCommand):
    """Show the list of CI commands."""

    name = "help"
    usage = "help"
    description = "Show this help"

    def __init__(self, prefix: str = "ci", registry=None):
        """Initialize help command.

        Args:
            prefix: Command prefix shown in help text
            registry: Command registry to describe
        """
        super().__init__(prefix)
        self.registry = registry

    def execute(self, args: List[str], context: CommandContext) -> Optional[str]:
        if self.registry is None:
            return self.get_help()
        return self.registry.get_help_text()


CI_COMMANDS = [
    StatusCommand,
    LastCommand,
    RetryCommand,
    ListCommand,
    CancelCommand,
    ClearCommand,
]
