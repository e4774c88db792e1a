"""Command registry for managing and dispatching commands."""

import logging
from typing import Dict, List, Optional, Type

from .base import BaseCommand

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Registry for all available commands.

    The registry owns command instances and provides lookup by name or alias.

    Example:
        registry = CommandRegistry(prefix="ci")
        registry.register(StatusCommand)

        command = registry.get("status")
        if command:
            response = command.execute(args, context)
    """

    def __init__(self, prefix: str = "ci"):
        """Initialize empty registry.

        Args:
            prefix: Command prefix handed to each registered command
        """
        self.prefix = prefix
        self._commands: Dict[str, BaseCommand] = {}
        self._aliases: Dict[str, str] = {}

    def register(self, command_class: Type[BaseCommand]) -> BaseCommand:
        """Instantiate and register a command class.

        Args:
            command_class: The command class to instantiate and register

        Returns:
            The registered command instance
        """
        instance = command_class(self.prefix)
        self.add(instance)
        return instance

    def add(self, instance: BaseCommand) -> None:
        """Register an already built command instance."""
        self._commands[instance.name] = instance
        for alias in instance.aliases:
            self._aliases[alias] = instance.name
        logger.debug(f"Registered command: {instance.name}")

    def get(self, name: str) -> Optional[BaseCommand]:
        """Get a command by name or alias.

        Args:
            name: Command name or alias (case-insensitive)

        Returns:
            Command instance or None if not found
        """
        name = name.lower()
        if name in self._commands:
            return self._commands[name]

        if name in self._aliases:
            return self._commands.get(self._aliases[name])

        return None

    def list_commands(self) -> List[str]:
        """List all registered command names in registration order."""
        return list(self._commands.keys())

    def get_help_text(self) -> str:
        """Generate help text for all commands.

        Returns:
            Formatted help text
        """
        lines = ["**CircleCI Commands:**", ""]
        for name in self.list_commands():
            cmd = self._commands[name]
            lines.append(f"  {cmd.get_help()}")
        return "\n".join(lines)
