"""Handles Zulip API interactions."""

import hashlib
import logging
import re
from typing import Any, Callable, Dict, Optional

import zulip

from .commands import CommandRouter

logger = logging.getLogger(__name__)


class ZulipHandler:
    """Manages the Zulip connection and routes messages to CI commands."""

    def __init__(self, zuliprc_path: str, router: CommandRouter, client: Optional[Any] = None):
        """Initialize Zulip handler.

        Args:
            zuliprc_path: Path to zuliprc file
            router: Command router that executes CI commands
            client: Optional pre-built Zulip client
        """
        self.client = client or zulip.Client(config_file=zuliprc_path)
        self.router = router

        result = self.client.get_profile()
        if result["result"] == "success":
            self.bot_email: str = result["email"]
            self.bot_id: int = result["user_id"]
            self.bot_full_name: str = result.get("full_name", "Bot")
            logger.info(f"Bot email: {self.bot_email}")
        else:
            raise Exception(f"Failed to get bot profile: {result}")

    def get_bot_email(self) -> str:
        return self.bot_email

    def _hash_user_email(self, email: str) -> str:
        """Create a consistent hash for user email (for logging without exposing email).

        Args:
            email: User email address to hash.

        Returns:
            16-character hex hash of the email.
        """
        return hashlib.sha256(email.encode()).hexdigest()[:16]

    def send_message(
        self, message_type: str, to: str, content: str, subject: Optional[str] = None
    ) -> Dict[str, Any]:
        """Send a message to Zulip.

        Args:
            message_type: Type of message ('private' or 'stream').
            to: Recipient (email for private, stream name for stream).
            content: Message content to send.
            subject: Optional subject/topic for stream messages.

        Returns:
            Dict containing the send result.
        """
        request = {
            "type": message_type,
            "to": to,
            "content": content,
        }

        if subject:
            request["subject"] = subject

        result = self.client.send_message(request)
        if result["result"] != "success":
            logger.error(f"Failed to send message: {result}")

        return dict(result)

    def _strip_mention(self, content: str) -> Optional[str]:
        """Remove a leading @-mention of the bot.

        Args:
            content: Raw message content

        Returns:
            Content without the mention, or None if the bot is not mentioned
        """
        mention_patterns = [
            f"@**{self.bot_full_name}**",
            f"@**{self.bot_email.split('@')[0]}**",
        ]
        for pattern in mention_patterns:
            if pattern in content:
                return re.sub(re.escape(pattern), "", content, count=1).strip()
        return None

    def _reply_to(self, msg: Dict[str, Any]) -> Callable[[str], None]:
        """Build a reply callable that answers where ``msg`` came from."""
        if msg.get("type") == "stream":
            stream_name = msg.get("display_recipient", "")
            subject = msg.get("subject", "")
            return lambda content: self.send_message(
                message_type="stream", to=stream_name, subject=subject, content=content
            )

        sender_email = msg.get("sender_email", "")
        return lambda content: self.send_message(
            message_type="private", to=sender_email, content=content
        )

    def handle_message(self, msg: Dict[str, Any]) -> None:
        """Process incoming message.

        Private messages are treated as commands as-is. Stream messages are
        only considered when they mention the bot.

        Args:
            msg: The incoming Zulip message dict.
        """
        sender_email = msg.get("sender_email", "")
        if sender_email == self.bot_email:
            logger.debug("Ignoring own message")
            return

        message_type = msg.get("type")
        content = (msg.get("content") or "").strip()
        sender_hash = self._hash_user_email(sender_email) if sender_email else "unknown"
        logger.info(f"Processing {message_type} from {sender_hash}")

        if message_type == "stream":
            stripped = self._strip_mention(content)
            if stripped is None:
                logger.debug("Bot not mentioned, ignoring stream message")
                return
            content = stripped
        elif message_type != "private":
            logger.warning(f"Unknown message type: {message_type}")
            return

        try:
            handled = self.router.dispatch(content, self._reply_to(msg), sender_hash)
        except Exception as e:
            logger.error(f"Error handling message: {e}", exc_info=True)
            return

        if not handled:
            logger.debug("Message is not a CI command")

    def start(self) -> None:
        """Start listening to messages."""
        logger.info("Starting event loop...")
        self.client.call_on_each_message(self.handle_message)
