"""Tests for Zulip message routing."""

import unittest
from unittest.mock import Mock

from ci_bot.zulip_handler import ZulipHandler


class TestZulipHandler(unittest.TestCase):
    """Test cases for ZulipHandler with a mocked Zulip client."""

    def setUp(self):
        self.zulip_client = Mock()
        self.zulip_client.get_profile.return_value = {
            "result": "success",
            "email": "ci-bot@zulip.example.com",
            "user_id": 7,
            "full_name": "CI Bot",
        }
        self.zulip_client.send_message.return_value = {"result": "success"}
        self.router = Mock()
        self.handler = ZulipHandler("/unused/zuliprc", self.router, client=self.zulip_client)

    def test_profile_failure_raises(self):
        self.zulip_client.get_profile.return_value = {"result": "error", "msg": "bad key"}

        with self.assertRaises(Exception):
            ZulipHandler("/unused/zuliprc", self.router, client=self.zulip_client)

    def test_ignores_own_messages(self):
        self.handler.handle_message(
            {"type": "private", "sender_email": "ci-bot@zulip.example.com", "content": "ci help"}
        )

        self.router.dispatch.assert_not_called()

    def test_private_message_replies_to_sender(self):
        self.router.dispatch.side_effect = lambda text, reply, sender: reply("pong") or True

        self.handler.handle_message(
            {"type": "private", "sender_email": "jane@example.com", "content": " ci status api "}
        )

        text = self.router.dispatch.call_args.args[0]
        self.assertEqual(text, "ci status api")
        self.zulip_client.send_message.assert_called_once_with(
            {"type": "private", "to": "jane@example.com", "content": "pong"}
        )

    def test_stream_message_requires_mention(self):
        self.handler.handle_message(
            {
                "type": "stream",
                "sender_email": "jane@example.com",
                "display_recipient": "builds",
                "subject": "ci",
                "content": "ci status api",
            }
        )

        self.router.dispatch.assert_not_called()

    def test_stream_message_with_mention(self):
        self.router.dispatch.side_effect = lambda text, reply, sender: reply("pong") or True

        self.handler.handle_message(
            {
                "type": "stream",
                "sender_email": "jane@example.com",
                "display_recipient": "builds",
                "subject": "nightly",
                "content": "@**CI Bot** ci list failed",
            }
        )

        self.assertEqual(self.router.dispatch.call_args.args[0], "ci list failed")
        self.zulip_client.send_message.assert_called_once_with(
            {"type": "stream", "to": "builds", "content": "pong", "subject": "nightly"}
        )

    def test_router_error_is_logged_not_raised(self):
        self.router.dispatch.side_effect = RuntimeError("boom")

        self.handler.handle_message(
            {"type": "private", "sender_email": "jane@example.com", "content": "ci help"}
        )

        self.zulip_client.send_message.assert_not_called()


if __name__ == "__main__":
    unittest.main()
