"""CircleCI API client.

Builds CircleCI REST URLs, issues requests, maps HTTP status codes to
outcomes, and formats successful payloads into chat messages.
"""

import logging
import urllib.parse
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Callable, List, Optional

import requests

from .config import CIConfig
from .models import Build, BuildStatus, Project, to_project

logger = logging.getLogger(__name__)

Reply = Callable[[str], None]

# Statuses accepted by the "by status" operations
FILTERABLE_STATUSES = (BuildStatus.SUCCESS.value, BuildStatus.FAILED.value)


class CIErrorKind(Enum):
    """Reasons a CircleCI request did not produce a usable payload."""

    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    TRANSPORT = "transport"
    UNEXPECTED = "unexpected"


@dataclass
class CIResult:
    """Outcome of a single CircleCI request.

    Exactly one of ``payload`` (on success) or ``error`` is meaningful.
    ``message`` carries the user-facing text for errors.
    """

    payload: Any = None
    error: Optional[CIErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None


class CircleCIClient:
    """Client for the CircleCI v1 REST API.

    Every operation performs its own request(s) and returns the chat message
    to send back. Errors are never raised to the caller; they are turned into
    the matching user-facing message.

    Example:
        client = CircleCIClient(load_config())
        message = client.get_latest_build("acme/widgets", "master")
    """

    def __init__(self, config: CIConfig, session: Optional[requests.Session] = None):
        """Initialize client.

        Args:
            config: Resolved bot configuration
            session: Optional pre-built requests session
        """
        self.config = config
        self._session = session or requests.Session()
        self._session.headers["Accept"] = "application/json"
        logger.info(f"CircleCI client initialized for {config.endpoint}")

    # ----- Request plumbing -----

    def resolve_project(self, name: str) -> str:
        """Qualify a bare project name with the configured organization."""
        return to_project(name, self.config.default_org)

    @staticmethod
    def _quote_project(project: str) -> str:
        return urllib.parse.quote(project, safe="/")

    @staticmethod
    def _quote(token: Any) -> str:
        return urllib.parse.quote(str(token), safe="")

    def _request(self, method: str, path: str, params: Optional[dict] = None) -> CIResult:
        """Make a request to the CircleCI API.

        Args:
            method: HTTP method (GET, POST, DELETE)
            path: Already-escaped API path, starting with ``/``
            params: Extra query parameters

        Returns:
            CIResult with the parsed payload or an error kind and message
        """
        url = f"{self.config.endpoint}{path}"
        query = {"circle-token": self.config.token}
        if params:
            query.update(params)

        logger.debug(f"CircleCI {method} {url}")
        try:
            response = self._session.request(
                method=method, url=url, params=query, timeout=self.config.request_timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"CircleCI request failed: {method} {url}: {e}")
            return CIResult(
                error=CIErrorKind.TRANSPORT, message=f"Something went really wrong: {e}"
            )

        return self._interpret(response)

    def _interpret(self, response: requests.Response) -> CIResult:
        """Map an HTTP response to a CIResult.

        Args:
            response: Response returned by the CircleCI API

        Returns:
            CIResult for the status code
        """
        status = response.status_code

        if status == 200:
            try:
                return CIResult(payload=response.json())
            except ValueError:
                logger.warning("CircleCI returned 200 with a non-JSON body")
                return self._unexpected(status, response.text)

        if status == 401:
            logger.warning("CircleCI rejected the API token")
            return CIResult(
                error=CIErrorKind.UNAUTHORIZED,
                message="Not authorized. Did you set CIRCLECI_TOKEN correctly?",
            )

        if status == 404:
            try:
                detail = response.json().get("message", "")
            except (ValueError, AttributeError):
                detail = response.text
            return CIResult(
                error=CIErrorKind.NOT_FOUND,
                message=f"I couldn't find what you were looking for: {detail}",
            )

        if status == 500:
            logger.error("CircleCI returned an internal server error")
            return CIResult(
                error=CIErrorKind.SERVER_ERROR,
                message="Yikes! I turned that circle into a square",
            )

        return self._unexpected(status, response.text)

    @staticmethod
    def _unexpected(status: int, body: str) -> CIResult:
        logger.warning(f"Unhandled CircleCI response: {status}")
        return CIResult(
            error=CIErrorKind.UNEXPECTED,
            message=f"Hmm.  I don't know how to process that CircleCI response: {status}: {body}",
        )

    # ----- Raw API calls -----

    def fetch_branch_builds(self, project: str, branch: str, limit: int = 1) -> CIResult:
        """GET /project/{project}/tree/{branch}."""
        path = f"/project/{self._quote_project(project)}/tree/{self._quote(branch)}"
        result = self._request("GET", path, params={"limit": limit})
        if result.ok:
            result.payload = [Build.from_api(b) for b in result.payload or []]
        return result

    def fetch_projects(self) -> CIResult:
        """GET /projects."""
        result = self._request("GET", "/projects")
        if result.ok:
            result.payload = [Project.from_api(p) for p in result.payload or []]
        return result

    def post_retry(self, project: str, build_num: Any) -> CIResult:
        """POST /project/{project}/{build_num}/retry."""
        path = f"/project/{self._quote_project(project)}/{self._quote(build_num)}/retry"
        return self._request("POST", path)

    def post_cancel(self, project: str, build_num: Any) -> CIResult:
        """POST /project/{project}/{build_num}/cancel."""
        path = f"/project/{self._quote_project(project)}/{self._quote(build_num)}/cancel"
        return self._request("POST", path)

    def delete_build_cache(self, project: str) -> CIResult:
        """DELETE /project/{project}/build-cache."""
        return self._request("DELETE", f"/project/{self._quote_project(project)}/build-cache")

    # ----- Chat operations -----

    def get_latest_build(self, project: str, branch: str = "master") -> str:
        """Report the current status of the latest build on a branch.

        Args:
            project: Project name (bare names are qualified)
            branch: Branch name

        Returns:
            Chat message
        """
        project = self.resolve_project(project)
        result = self.fetch_branch_builds(project, branch)
        if not result.ok:
            return result.message

        builds: List[Build] = result.payload
        if not builds:
            return f"Current status: {project} [{branch}]: unknown"
        return f"Current status: {builds[0].describe()}"

    def get_last_build(self, project: str, branch: str = "master") -> str:
        """Report the last finished build on a branch.

        When the latest build is still running, the build before it is
        reported instead.

        Args:
            project: Project name (bare names are qualified)
            branch: Branch name

        Returns:
            Chat message
        """
        project = self.resolve_project(project)
        result = self.fetch_branch_builds(project, branch)
        if not result.ok:
            return result.message

        builds: List[Build] = result.payload
        if not builds:
            return f"Current status: {project} [{branch}]: unknown"

        latest = builds[0]
        if not latest.is_running:
            return f"Current status: {latest.describe()}"

        previous = latest.previous
        if previous and previous.status is not BuildStatus.UNKNOWN:
            return (
                f"Last status: {previous.status.display} in build {previous.build_num} "
                f"of {latest.vcs_url} [{latest.branch or branch}]"
            )
        return f"Last build status for {project} [{branch}]: unknown"

    def retry_build(self, project: str, build_num: Any) -> str:
        """Retry a build.

        Args:
            project: Project name (bare names are qualified)
            build_num: Build number to retry

        Returns:
            Chat message naming the newly assigned build number
        """
        project = self.resolve_project(project)
        result = self.post_retry(project, build_num)
        if not result.ok:
            return result.message

        payload = result.payload or {}
        logger.info(f"Retried build {build_num} of {project} as {payload.get('build_num')}")
        return (
            f"Retrying build {build_num} of {project} [{payload.get('branch')}] "
            f"with build {payload.get('build_num')}"
        )

    def retry_last_build(self, project: str) -> str:
        """Retry the latest build of a project.

        The latest build is always looked up on ``master``.

        Args:
            project: Project name (bare names are qualified)

        Returns:
            Chat message
        """
        branch = "master"
        project = self.resolve_project(project)
        result = self.fetch_branch_builds(project, branch)
        if not result.ok:
            return result.message

        builds: List[Build] = result.payload
        if not builds:
            return f"Current status: {project} [{branch}]: unknown"
        return self.retry_build(project, builds[0].build_num)

    def cancel_build(self, project: str, build_num: Any) -> str:
        """Cancel a running build.

        Args:
            project: Project name (bare names are qualified)
            build_num: Build number to cancel

        Returns:
            Chat message
        """
        project = self.resolve_project(project)
        result = self.post_cancel(project, build_num)
        if not result.ok:
            return result.message

        payload = result.payload or {}
        logger.info(f"Canceled build {build_num} of {project}")
        return (
            f"Canceled build {payload.get('build_num', build_num)} for {project} "
            f"[{payload.get('branch')}]"
        )

    def clear_cache(self, project: str) -> str:
        """Clear the build cache of a project.

        Args:
            project: Project name (bare names are qualified)

        Returns:
            Chat message
        """
        project = self.resolve_project(project)
        result = self.delete_build_cache(project)
        if not result.ok:
            return result.message

        logger.info(f"Cleared build cache for {project}")
        return f"Cleared build cache for {project}"

    def projects_by_status(self, status: str) -> CIResult:
        """Fetch followed projects whose latest default-branch outcome matches.

        Args:
            status: Outcome to match (``success`` or ``failed``)

        Returns:
            CIResult whose payload is the list of matching Project objects
        """
        wanted = BuildStatus.parse(status)
        result = self.fetch_projects()
        if not result.ok:
            return result

        matching = []
        for project in result.payload:
            last = project.last_build()
            if last is not None and last.outcome is wanted:
                matching.append(project)
        result.payload = matching
        return result

    def list_projects_by_status(self, status: str) -> str:
        """List projects whose last build has the given outcome.

        Args:
            status: ``success`` or ``failed``

        Returns:
            Multi-line chat message with one build link per project
        """
        result = self.projects_by_status(status)
        if not result.ok:
            return result.message

        projects: List[Project] = result.payload
        if not projects:
            return f"No projects match status {status}"

        lines = [f"Projects where the last build's status is {status}:"]
        for project in projects:
            last = project.last_build()
            if last is None:
                continue
            lines.append(
                f"{last.outcome.display} in build "
                f"https://{self.config.host}/gh/{project.slug}/{last.build_num} "
                f"of {project.vcs_url} [{project.default_branch}]"
            )
        return "\n".join(lines)

    def retry_all_by_status(self, status: str, reply: Reply) -> None:
        """Retry the latest build of every project with the given outcome.

        Each retry reports through ``reply`` on its own; there is no summary.

        Args:
            status: ``success`` or ``failed``
            reply: Callable that posts one chat message
        """
        result = self.projects_by_status(status)
        if not result.ok:
            reply(result.message)
            return

        projects: List[Project] = result.payload
        if not projects:
            reply(f"No projects match status {status}")
            return

        tasks = []
        for project in projects:
            last = project.last_build()
            if last is not None:
                tasks.append(partial(self.retry_build, project.slug, last.build_num))
        self._fan_out(tasks, reply)

    def clear_all_caches(self, reply: Reply) -> None:
        """Clear the build cache of every followed project.

        Args:
            reply: Callable that posts one chat message
        """
        result = self.fetch_projects()
        if not result.ok:
            reply(result.message)
            return

        projects: List[Project] = result.payload
        if not projects:
            reply("No projects to clear")
            return

        self._fan_out([partial(self.clear_cache, p.slug) for p in projects], reply)

    def _fan_out(self, tasks: List[Callable[[], str]], reply: Reply) -> None:
        """Run independent operations concurrently and reply as each finishes.

        Args:
            tasks: Zero-argument callables returning a chat message
            reply: Callable that posts one chat message
        """
        logger.info(f"Fanning out {len(tasks)} CircleCI requests")
        with ThreadPoolExecutor(max_workers=self.config.fanout_workers) as pool:
            futures = [pool.submit(task) for task in tasks]
            for future in as_completed(futures):
                try:
                    message = future.result()
                except Exception as e:
                    logger.error(f"Fan-out request failed: {e}", exc_info=True)
                    message = f"Something went really wrong: {e}"
                reply(message)
