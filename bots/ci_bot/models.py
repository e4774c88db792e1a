"""Data models for CircleCI API payloads.

Provides typed dataclasses for builds and projects. Raw provider strings are
normalized into BuildStatus at the deserialization boundary.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

SHORT_SHA_LENGTH = 7


def to_project(name: str, default_org: Optional[str]) -> str:
    """Qualify a bare repository name with the default organization.

    Args:
        name: Project name, either ``org/repo`` or bare ``repo``
        default_org: Organization prepended to bare names (may be empty)

    Returns:
        Project identifier in ``org/repo`` form when an org is known
    """
    if "/" not in name and default_org:
        return f"{default_org}/{name}"
    return name


def to_sha(vcs_revision: str) -> str:
    """Shorten a commit hash for display."""
    return vcs_revision[:SHORT_SHA_LENGTH]


def to_display(status: str) -> str:
    """Uppercase the first character of a status string."""
    if not status:
        return status
    return status[0].upper() + status[1:]


class BuildStatus(Enum):
    """Build lifecycle and outcome values reported by CircleCI."""

    RETRIED = "retried"
    CANCELED = "canceled"
    INFRASTRUCTURE_FAIL = "infrastructure_fail"
    TIMEDOUT = "timedout"
    NOT_RUN = "not_run"
    RUNNING = "running"
    FAILED = "failed"
    QUEUED = "queued"
    SCHEDULED = "scheduled"
    NOT_RUNNING = "not_running"
    NO_TESTS = "no_tests"
    FIXED = "fixed"
    SUCCESS = "success"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "BuildStatus":
        """Map a provider string to a BuildStatus.

        Args:
            value: Raw status/outcome string from the API (may be None)

        Returns:
            Matching BuildStatus, or UNKNOWN for missing/unrecognized values
        """
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value)
        except ValueError:
            logger.debug(f"Unrecognized build status from provider: {value!r}")
            return cls.UNKNOWN

    @property
    def display(self) -> str:
        return to_display(self.value)


@dataclass(frozen=True)
class PreviousBuild:
    """Summary of the build preceding another build."""

    build_num: int
    status: BuildStatus

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> Optional["PreviousBuild"]:
        if not data:
            return None
        return cls(
            build_num=int(data.get("build_num") or 0),
            status=BuildStatus.parse(data.get("status")),
        )


@dataclass(frozen=True)
class Build:
    """A single CircleCI build."""

    build_num: int
    status: BuildStatus
    outcome: BuildStatus = BuildStatus.UNKNOWN
    vcs_revision: str = ""
    branch: str = ""
    committer_name: str = ""
    subject: str = ""
    why: str = ""
    vcs_url: str = ""
    previous: Optional[PreviousBuild] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Build":
        """Create from a CircleCI API build object.

        Args:
            data: Build JSON object

        Returns:
            Build instance
        """
        return cls(
            build_num=int(data.get("build_num") or 0),
            status=BuildStatus.parse(data.get("status")),
            outcome=BuildStatus.parse(data.get("outcome")),
            vcs_revision=data.get("vcs_revision") or "",
            branch=data.get("branch") or "",
            committer_name=data.get("committer_name") or "",
            subject=data.get("subject") or "",
            why=data.get("why") or "",
            vcs_url=data.get("vcs_url") or "",
            previous=PreviousBuild.from_api(data.get("previous")),
        )

    @property
    def short_sha(self) -> str:
        return to_sha(self.vcs_revision)

    @property
    def is_running(self) -> bool:
        return self.status is BuildStatus.RUNNING

    def describe(self) -> str:
        """Render the one-line display identity of this build.

        Returns:
            ``<Status> in build <num> of <url> [<branch>/<sha>] <committer>: <subject> - <why>``
        """
        return (
            f"{self.status.display} in build {self.build_num} of {self.vcs_url} "
            f"[{self.branch}/{self.short_sha}] {self.committer_name}: {self.subject} - {self.why}"
        )


@dataclass
class Project:
    """A followed CircleCI project with its recent builds per branch."""

    username: str
    reponame: str
    vcs_url: str = ""
    default_branch: str = "master"
    branches: Dict[str, List[Build]] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Project":
        """Create from a ``GET /projects`` entry.

        Args:
            data: Project JSON object

        Returns:
            Project instance
        """
        branches: Dict[str, List[Build]] = {}
        for name, state in (data.get("branches") or {}).items():
            recent = (state or {}).get("recent_builds") or []
            branches[name] = [Build.from_api(b) for b in recent]

        return cls(
            username=data.get("username", ""),
            reponame=data.get("reponame", ""),
            vcs_url=data.get("vcs_url", ""),
            default_branch=data.get("default_branch") or "master",
            branches=branches,
        )

    @property
    def slug(self) -> str:
        return f"{self.username}/{self.reponame}"

    def last_build(self) -> Optional[Build]:
        """Most recent build on the default branch, if any."""
        builds = self.branches.get(self.default_branch) or []
        return builds[0] if builds else None
