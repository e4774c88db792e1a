"""Routes chat text to CI commands.

The router owns the command registry, recognizes messages that start with
the command prefix, and executes the matching command.
"""

import logging
import re
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

from .base import CommandContext
from .ci_commands import CI_COMMANDS, HelpCommand
from .registry import CommandRegistry

if TYPE_CHECKING:
    from ..ci_client import CircleCIClient

logger = logging.getLogger(__name__)


class CommandRouter:
    """Matches chat messages against the command prefix and dispatches them.

    Example:
        router = CommandRouter(ci_client, prefix="ci")
        router.dispatch("ci status acme/widgets", reply=print)
    """

    def __init__(self, ci_client: "CircleCIClient", prefix: str = "ci"):
        """Initialize router and register all commands.

        Args:
            ci_client: CircleCI client handed to commands
            prefix: Word every command starts with (matched case-insensitively)
        """
        self.ci_client = ci_client
        self.prefix = prefix
        self._pattern = re.compile(
            rf"^\s*{re.escape(prefix)}(?:\s+(.*))?$", re.IGNORECASE | re.DOTALL
        )

        self.registry = CommandRegistry(prefix)
        for command_class in CI_COMMANDS:
            self.registry.register(command_class)
        self.registry.add(HelpCommand(prefix, self.registry))

        logger.info(f"Registered {len(self.registry.list_commands())} commands")

    def parse(self, text: str) -> Optional[Tuple[str, List[str]]]:
        """Split a chat message into command name and arguments.

        Args:
            text: Raw message text

        Returns:
            ``(command_name, args)`` or None if the text is not a command
        """
        match = self._pattern.match(text or "")
        if not match:
            return None

        tokens = (match.group(1) or "").split()
        if not tokens:
            return "help", []
        return tokens[0].lower(), tokens[1:]

    def dispatch(self, text: str, reply: Callable[[str], None], sender_email: str = "") -> bool:
        """Execute the command contained in a chat message.

        Args:
            text: Raw message text
            reply: Callable that posts a chat message back
            sender_email: Email of the sender, for logging

        Returns:
            True if the text was a command (even a failing one), False otherwise
        """
        parsed = self.parse(text)
        if parsed is None:
            return False

        command_name, args = parsed
        command = self.registry.get(command_name)
        if command is None:
            reply(f"Unknown command `{command_name}`. Try `{self.prefix} help`.")
            return True

        logger.info(f"Processing command from {sender_email or 'unknown'}: {command_name} {args}")
        context = CommandContext(ci_client=self.ci_client, reply=reply, sender_email=sender_email)

        try:
            response = command.execute(args, context)
        except Exception as e:
            logger.error(f"Command execution failed: {e}", exc_info=True)
            response = f"Command failed: {str(e)}"

        if response:
            reply(response)
        return True
