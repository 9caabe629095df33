"""GitHub API client wrapper.

Read calls go through a `requests.Session` against the REST (and GraphQL) API;
issue creation goes through PyGithub. Callers never see raw JSON.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse, urlunparse

import requests
from github import Auth, Github

from issue_seeder import __version__
from issue_seeder.models import TargetRepository

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class RepositoryNotFound(LookupError):
    """Raised when GitHub answers 404 for a repository."""

    def __init__(self, target: TargetRepository) -> None:
        super().__init__(f"Repository not found: {target.full_name}")
        self.target = target


@dataclass(frozen=True, slots=True)
class RepositoryMetadata:
    full_name: str
    archived: bool
    has_issues: bool


@dataclass(frozen=True, slots=True)
class IssueSummary:
    title: str
    url: str
    state: str


@dataclass(frozen=True, slots=True)
class CreatedIssue:
    """Minimal issue metadata returned from GitHub after creation."""

    repository: str
    number: int
    title: str
    url: str
    node_id: str | None


@dataclass(frozen=True, slots=True)
class ProjectBoard:
    id: str
    title: str


class GitHubClient:
    """Small wrapper around requests + PyGithub for the calls a seeding run needs."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        session: requests.Session | None = None,
        github_api: Github | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")

        self._rest_base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": f"github-issue-seeder/{__version__}",
            }
        )
        self._github = github_api or Github(
            auth=Auth.Token(token),
            base_url=self._rest_base_url,
            retry=None,
            lazy=True,
        )

    def _repo_url(self, target: TargetRepository, path: str = "") -> str:
        url = f"{self._rest_base_url}/repos/{target.owner}/{target.name}"
        path = path.strip("/")
        return f"{url}/{path}" if path else url

    def _graphql_url(self) -> str:
        """Derive the GraphQL endpoint from the REST base URL.

        GitHub.com:
            REST: https://api.github.com
            GQL:  https://api.github.com/graphql

        GitHub Enterprise:
            REST: https://github.example.com/api/v3
            GQL:  https://github.example.com/api/graphql
        """

        parsed = urlparse(self._rest_base_url)
        path = parsed.path.rstrip("/")

        if path.endswith("/api/v3"):
            path = path[: -len("/v3")]
        path = path + "/graphql"

        return urlunparse(parsed._replace(path=path))

    def _graphql(self, *, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        resp = self._session.post(
            self._graphql_url(),
            json={"query": query, "variables": variables},
            timeout=DEFAULT_TIMEOUT,
        )
        resp.raise_for_status()
        payload: dict[str, Any] = resp.json()
        errors = payload.get("errors")
        if errors:
            messages = []
            if isinstance(errors, list):
                for item in errors:
                    if isinstance(item, dict) and isinstance(item.get("message"), str):
                        messages.append(item["message"])
            message = "; ".join(messages) if messages else "Unknown GraphQL error"
            raise RuntimeError(f"GitHub GraphQL error: {message}")
        return payload

    def get_repository(self, target: TargetRepository) -> RepositoryMetadata:
        """Fetch the flags that decide whether a repository accepts issues.

        Raises:
            RepositoryNotFound: on 404.
            requests.HTTPError: on any other error status.
            ValueError: when the body is not a JSON object.
        """

        resp = self._session.get(self._repo_url(target), timeout=DEFAULT_TIMEOUT)
        if resp.status_code == 404:
            raise RepositoryNotFound(target)
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected repository payload for {target.full_name}")

        full_name = data.get("full_name")
        if not isinstance(full_name, str) or not full_name.strip():
            full_name = target.full_name

        return RepositoryMetadata(
            full_name=full_name,
            archived=bool(data.get("archived")),
            has_issues=bool(data.get("has_issues")),
        )

    def list_open_issues(
        self, target: TargetRepository, *, per_page: int = 100
    ) -> list[IssueSummary]:
        """Return the first page of open issues.

        The issues endpoint lists open pull requests too; they are kept so a pull
        request with the same title counts as an existing item.
        """

        resp = self._session.get(
            self._repo_url(target, "issues"),
            params={"state": "open", "per_page": per_page},
            timeout=DEFAULT_TIMEOUT,
        )
        resp.raise_for_status()
        payload = resp.json()
        if not isinstance(payload, list):
            return []

        issues: list[IssueSummary] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            title = item.get("title")
            if not isinstance(title, str):
                continue
            url = item.get("html_url")
            state = item.get("state")
            issues.append(
                IssueSummary(
                    title=title,
                    url=url if isinstance(url, str) else "",
                    state=state if isinstance(state, str) else "open",
                )
            )
        return issues

    def get_readme(self, target: TargetRepository) -> str:
        """Return the raw text of a repository's root README."""

        resp = self._session.get(
            self._repo_url(target, "readme"),
            headers={"Accept": "application/vnd.github.raw"},
            timeout=DEFAULT_TIMEOUT,
        )
        if resp.status_code == 404:
            raise FileNotFoundError(f"README not found in {target.full_name}")
        resp.raise_for_status()
        return resp.text

    def create_issue(
        self,
        target: TargetRepository,
        *,
        title: str,
        body: str,
        labels: Sequence[str] = (),
    ) -> CreatedIssue:
        """Create an issue; PyGithub raises `GithubException` on any error status."""

        if not title.strip():
            raise ValueError("Issue title is required")

        repo = self._github.get_repo(target.full_name)
        issue = repo.create_issue(title=title, body=body, labels=list(labels))

        node_id = issue.raw_data.get("node_id") if isinstance(issue.raw_data, dict) else None
        return CreatedIssue(
            repository=target.full_name,
            number=issue.number,
            title=issue.title,
            url=issue.html_url,
            node_id=node_id if isinstance(node_id, str) and node_id.strip() else None,
        )

    def get_project_id(self, *, owner: str, number: int) -> ProjectBoard | None:
        """Resolve an organization Projects (v2) board by number."""

        query = """
        query($owner: String!, $number: Int!) {
          organization(login: $owner) {
            projectV2(number: $number) {
              id
              title
            }
          }
        }
        """
        payload = self._graphql(query=query, variables={"owner": owner, "number": number})
        data = payload.get("data")
        if not isinstance(data, dict):
            return None
        org = data.get("organization")
        if not isinstance(org, dict):
            return None
        project = org.get("projectV2")
        if not isinstance(project, dict):
            return None

        project_id = project.get("id")
        if not isinstance(project_id, str) or not project_id.strip():
            return None
        title = project.get("title")
        return ProjectBoard(id=project_id, title=title if isinstance(title, str) else "")

    def add_item_to_project(self, *, project_id: str, content_id: str) -> str:
        """Attach an issue (by node id) to a board; returns the board item id."""

        mutation = """
        mutation($projectId: ID!, $contentId: ID!) {
          addProjectV2ItemById(input: {projectId: $projectId, contentId: $contentId}) {
            item {
              id
            }
          }
        }
        """
        payload = self._graphql(
            query=mutation,
            variables={"projectId": project_id, "contentId": content_id},
        )
        data = payload.get("data")
        result = data.get("addProjectV2ItemById") if isinstance(data, dict) else None
        item = result.get("item") if isinstance(result, dict) else None
        item_id = item.get("id") if isinstance(item, dict) else None
        if not isinstance(item_id, str) or not item_id.strip():
            raise RuntimeError("Unexpected addProjectV2ItemById response: missing item id")
        return item_id

    def close(self) -> None:
        self._session.close()
        self._github.close()
