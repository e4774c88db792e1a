"""Command system for the CircleCI bot.

Example:
    from commands import CommandRouter

    router = CommandRouter(ci_client, prefix="ci")
    router.dispatch("ci status acme/widgets", reply)
"""

from .base import BaseCommand, CommandContext
from .ci_commands import (
    CancelCommand,
    ClearCommand,
    HelpCommand,
    LastCommand,
    ListCommand,
    RetryCommand,
    StatusCommand,
)
from .registry import CommandRegistry
from .router import CommandRouter

__all__ = [
    # Base classes
    "BaseCommand",
    "CommandContext",
    "CommandRegistry",
    "CommandRouter",
    # CI commands
    "StatusCommand",
    "LastCommand",
    "RetryCommand",
    "ListCommand",
    "CancelCommand",
    "ClearCommand",
    "HelpCommand",
]
