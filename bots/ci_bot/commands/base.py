"""Base classes for the chat command system.

Commands parse their own arguments and call into the CircleCI client.
Everything a command needs at execution time travels in CommandContext.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, List, Optional

if TYPE_CHECKING:
    from ..ci_client import CircleCIClient


class CommandContext:
    """Context passed to command execution.

    Attributes:
        ci_client: CircleCI client used for all requests
        reply: Callable that posts a chat message back to the origin of the command
        sender_email: Email of the command sender
    """

    def __init__(
        self,
        ci_client: "CircleCIClient",
        reply: Callable[[str], None],
        sender_email: str = "",
    ):
        """Initialize command context.

        Args:
            ci_client: CircleCI client used for all requests
            reply: Callable that posts a chat message
            sender_email: Email of the command sender
        """
        self.ci_client = ci_client
        self.reply = reply
        self.sender_email = sender_email


class BaseCommand(ABC):
    """Abstract base class for all CI commands.

    Example:
        class ClearCommand(BaseCommand):
            name = "clear"
            usage = "clear <project|all>"
            description = "Clear the build cache"

            def execute(self, args, context):
                return context.ci_client.clear_cache(args[0])
    """

    name: str = ""
    usage: str = ""
    description: str = ""
    aliases: List[str] = []

    def __init__(self, prefix: str = "ci"):
        """Initialize command.

        Args:
            prefix: Command prefix shown in usage and help text
        """
        self.prefix = prefix

    @abstractmethod
    def execute(self, args: List[str], context: CommandContext) -> Optional[str]:
        """Execute the command.

        Args:
            args: Whitespace-separated tokens after the command name
            context: Execution context with all dependencies

        Returns:
            Response string to send back, or None when the command already
            replied through ``context.reply``
        """
        pass

    def usage_message(self) -> str:
        return f"Usage: `{self.prefix} {self.usage}`"

    def get_help(self) -> str:
        """Get help text for this command.

        Returns:
            Formatted help text
        """
        return f"`{self.prefix} {self.usage}` - {self.description}"
