"""Configuration for the CircleCI bot.

Settings are resolved once at startup in three layers: built-in defaults,
an optional YAML file, then environment variables.
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "/app/config/ci.yml"

# environment variable -> CIConfig field
ENV_OVERRIDES = {
    "CIRCLECI_HOST": "host",
    "CIRCLECI_TOKEN": "token",
    "CIRCLECI_ORG": "default_org",
    "CI_COMMAND_PREFIX": "command_prefix",
    "CI_REQUEST_TIMEOUT": "request_timeout",
    "CI_FANOUT_WORKERS": "fanout_workers",
}

INT_FIELDS = {"request_timeout", "fanout_workers"}


@dataclass(frozen=True)
class CIConfig:
    """Settings threaded into the CircleCI client and command router.

    Attributes:
        host: CircleCI host name (no scheme)
        token: API token sent as the ``circle-token`` query parameter
        default_org: Organization prepended to bare project names
        command_prefix: Word that starts every chat command
        request_timeout: Per-request timeout in seconds
        fanout_workers: Max concurrent requests for "all projects" operations
    """

    host: str = "circleci.com"
    token: str = ""
    default_org: str = ""
    command_prefix: str = "ci"
    request_timeout: int = 30
    fanout_workers: int = 4

    @property
    def endpoint(self) -> str:
        return f"https://{self.host}/api/v1"


def _load_yaml(path: str) -> Dict[str, Any]:
    """Read config values from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Dict of recognized config keys, empty if the file is absent or invalid
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.debug(f"No config file at {path}, using defaults")
        return {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config file {path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.error(f"Config file {path} must contain a mapping, ignoring it")
        return {}

    known = {f.name for f in fields(CIConfig)}
    unknown = set(data) - known
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
    return {k: v for k, v in data.items() if k in known}


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    coerced: Dict[str, Any] = {}
    for key, value in values.items():
        if value is None:
            continue
        if key in INT_FIELDS:
            try:
                coerced[key] = int(value)
            except (TypeError, ValueError):
                logger.warning(f"Invalid integer for {key}: {value!r}, keeping default")
            continue
        coerced[key] = str(value)
    return coerced


def load_config(path: Optional[str] = None) -> CIConfig:
    """Build the bot configuration.

    Args:
        path: Optional YAML config path. Falls back to ``CI_CONFIG_FILE``
            and then to ``/app/config/ci.yml``.

    Returns:
        Resolved CIConfig
    """
    config_path = path or os.getenv("CI_CONFIG_FILE", DEFAULT_CONFIG_FILE)
    values = _load_yaml(config_path)

    for env_name, field_name in ENV_OVERRIDES.items():
        env_value = os.getenv(env_name)
        if env_value:
            values[field_name] = env_value

    config = replace(CIConfig(), **_coerce(values))

    if not config.token:
        logger.warning("CIRCLECI_TOKEN not set - CircleCI will reject requests")
    if config.fanout_workers < 1:
        logger.warning("fanout_workers must be at least 1, using 1")
        config = replace(config, fanout_workers=1)

    logger.info(
        f"CircleCI config loaded: host={config.host}, "
        f"default_org={config.default_org or '-'}, prefix={config.command_prefix}"
    )
    return config
