"""CircleCI bot for Zulip.

Chat commands (``ci status``, ``ci retry``, ...) are routed to a thin
CircleCI REST client whose responses are formatted back into chat messages.
"""

__all__ = [
    "ci_client",
    "commands",
    "config",
    "main",
    "models",
    "zulip_handler",
]
