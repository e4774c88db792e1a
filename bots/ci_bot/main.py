#!/usr/bin/env python3
"""Main entry point for the CircleCI Zulip bot.

Initialization Order:
    1. Config - defaults, optional YAML file, environment overrides
    2. CircleCI Client - REST client built from the config
    3. Command Router - registers the CI commands
    4. Zulip Handler - main message processing loop

Environment Variables:
    CIRCLECI_HOST: CircleCI host (default: 'circleci.com')
    CIRCLECI_TOKEN: CircleCI API token
    CIRCLECI_ORG: Organization prepended to bare project names
    CI_COMMAND_PREFIX: Command prefix (default: 'ci')
    CI_CONFIG_FILE: YAML config file (default: '/app/config/ci.yml')
    ZULIPRC: Path to zuliprc (default: '/app/zuliprc')
    LOG_LEVEL: Logging level (default: 'INFO')

Example:
    $ export CIRCLECI_TOKEN=...
    $ export CIRCLECI_ORG=acme
    $ export LOG_LEVEL=DEBUG
    $ python -m ci_bot.main
"""

import logging
import os
import sys

from .ci_client import CircleCIClient
from .commands import CommandRouter
from .config import load_config
from .zulip_handler import ZulipHandler

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Configure root logging from LOG_LEVEL."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )


def main():
    """Initialize bot and start event loop.

    Raises:
        SystemExit: On fatal initialization errors (exit code 1)
    """
    setup_logging()
    logger.info("Starting CircleCI Zulip bot")

    try:
        config = load_config()
        ci_client = CircleCIClient(config)
        router = CommandRouter(ci_client, prefix=config.command_prefix)

        zulip_handler = ZulipHandler(
            zuliprc_path=os.getenv("ZULIPRC", "/app/zuliprc"),
            router=router,
        )

        logger.info("Bot initialized successfully")
        logger.info(f"Bot user: {zulip_handler.get_bot_email()}")
        logger.info("Waiting for messages...")

        zulip_handler.start()

    except KeyboardInterrupt:
        logger.info("Shutting down gracefully...")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
