"""Shared fixtures for CircleCI bot tests."""

import json
from typing import Any
from unittest.mock import Mock

from ci_bot.config import CIConfig

VCS_URL = "https://github.com/acme/widgets"


def make_config(**overrides: Any) -> CIConfig:
    values = {"host": "circleci.com", "token": "secret-token", "default_org": "acme"}
    values.update(overrides)
    return CIConfig(**values)


def make_response(status_code: int, body: Any = None) -> Mock:
    """Build a fake requests.Response."""
    response = Mock()
    response.status_code = status_code
    if isinstance(body, (dict, list)):
        response.json.return_value = body
        response.text = json.dumps(body)
    else:
        response.text = body or ""
        response.json.side_effect = ValueError("No JSON object could be decoded")
    return response


def make_build(**overrides: Any) -> dict:
    build = {
        "build_num": 42,
        "status": "success",
        "outcome": "success",
        "vcs_revision": "abcdef1234567",
        "branch": "master",
        "committer_name": "Jane",
        "subject": "Fix bug",
        "why": "push",
        "vcs_url": VCS_URL,
    }
    build.update(overrides)
    return build


def make_project(reponame: str, outcome: str, build_num: int, username: str = "acme") -> dict:
    return {
        "username": username,
        "reponame": reponame,
        "vcs_url": f"https://github.com/{username}/{reponame}",
        "default_branch": "master",
        "branches": {
            "master": {
                "recent_builds": [
                    {"build_num": build_num, "outcome": outcome, "status": outcome},
                    {"build_num": build_num - 1, "outcome": "success", "status": "success"},
                ]
            }
        },
    }
