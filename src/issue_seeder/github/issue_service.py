"""Issue reconciliation: make sure one issue exists on one repository.

For each (candidate, repository) pair:
- skip candidates without a title
- probe the repository (missing, archived, issues disabled => skip)
- look for an open issue with the exact same title (=> duplicate)
- in dry-run mode stop here, otherwise create the issue
- optionally attach the created issue to a Projects (v2) board

Failure policy per step:
- probing fails closed: any error means "not found", the repository is skipped
- duplicate detection fails open: any error means "no duplicate"
- creation errors become a failed outcome
- board attachment errors are logged and never change the outcome

Nothing here raises for a single candidate; the batch always continues.
"""

from __future__ import annotations

import logging

import requests
from github import GithubException

from issue_seeder.github.client import CreatedIssue, GitHubClient, RepositoryNotFound
from issue_seeder.models import (
    SKIP_ARCHIVED,
    SKIP_EMPTY_NAME,
    SKIP_ISSUES_DISABLED,
    SKIP_NOT_FOUND,
    CandidateIssue,
    Outcome,
    TargetRepository,
    TargetState,
)

logger = logging.getLogger(__name__)

GENERIC_CREATE_FAILURE = "Issue creation failed"

_SKIP_REASONS: dict[TargetState, str] = {
    TargetState.NOT_FOUND: SKIP_NOT_FOUND,
    TargetState.ARCHIVED: SKIP_ARCHIVED,
    TargetState.ISSUES_DISABLED: SKIP_ISSUES_DISABLED,
}


def describe_error(error: Exception) -> str:
    """Return the most specific message available for a failed GitHub call."""

    if isinstance(error, GithubException):
        data = error.data
        if isinstance(data, dict):
            message = data.get("message")
            if isinstance(message, str) and message.strip():
                return message.strip()
    if isinstance(error, requests.HTTPError) and error.response is not None:
        try:
            payload = error.response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            message = payload.get("message")
            if isinstance(message, str) and message.strip():
                return message.strip()
    text = str(error).strip()
    return text or GENERIC_CREATE_FAILURE


class IssueService:
    """High-level, testable reconciliation of one candidate against one repository."""

    def __init__(
        self,
        *,
        github: GitHubClient,
        dry_run: bool = False,
        project_id: str | None = None,
    ) -> None:
        self._github = github
        self._dry_run = dry_run
        self._project_id = project_id

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def probe(self, target: TargetRepository) -> TargetState:
        try:
            metadata = self._github.get_repository(target)
        except RepositoryNotFound:
            return TargetState.NOT_FOUND
        except (requests.RequestException, ValueError) as e:
            logger.warning(
                "Repository check failed; treating as not found",
                extra={"repo": target.full_name, "error": str(e)},
            )
            return TargetState.NOT_FOUND

        if metadata.archived:
            return TargetState.ARCHIVED
        if not metadata.has_issues:
            return TargetState.ISSUES_DISABLED
        return TargetState.OPEN

    def find_open_duplicate(self, target: TargetRepository, title: str) -> str | None:
        """Return the URL of an open issue titled exactly `title`, if any.

        Only the first page of open issues is inspected.
        """

        try:
            issues = self._github.list_open_issues(target)
        except (requests.RequestException, ValueError) as e:
            logger.warning(
                "Open issue lookup failed; assuming no duplicate",
                extra={"repo": target.full_name, "error": str(e)},
            )
            return None

        for issue in issues:
            if issue.title == title:
                return issue.url
        return None

    def attach_to_board(self, created: CreatedIssue) -> bool:
        """Best-effort board attachment; returns whether the item was added."""

        if self._project_id is None:
            return False
        if created.node_id is None:
            logger.warning(
                "Created issue has no node id; cannot add it to the project board",
                extra={"repo": created.repository, "issue_number": created.number},
            )
            return False
        try:
            self._github.add_item_to_project(
                project_id=self._project_id, content_id=created.node_id
            )
        except (requests.RequestException, RuntimeError, ValueError) as e:
            logger.warning(
                "Failed to add issue to project board",
                extra={"repo": created.repository, "issue_number": created.number, "error": str(e)},
            )
            return False

        logger.info(
            "Issue added to project board",
            extra={"repo": created.repository, "issue_number": created.number},
        )
        return True

    def reconcile(self, candidate: CandidateIssue, target: TargetRepository) -> Outcome:
        repo = target.full_name

        if not candidate.is_actionable:
            return Outcome.skipped(target=repo, title=candidate.title, reason=SKIP_EMPTY_NAME)

        state = self.probe(target)
        if state is not TargetState.OPEN:
            return Outcome.skipped(target=repo, title=candidate.title, reason=_SKIP_REASONS[state])

        existing_url = self.find_open_duplicate(target, candidate.title)
        if existing_url is not None:
            return Outcome.duplicate(target=repo, title=candidate.title, url=existing_url)

        if self._dry_run:
            return Outcome.would_create(target=repo, title=candidate.title)

        try:
            created = self._github.create_issue(
                target,
                title=candidate.title,
                body=candidate.body,
                labels=candidate.labels,
            )
        except Exception as e:
            logger.warning(
                "Issue creation failed",
                extra={"repo": repo, "title": candidate.title},
                exc_info=True,
            )
            return Outcome.failed(target=repo, title=candidate.title, reason=describe_error(e))

        logger.info(
            "Issue created",
            extra={"repo": repo, "issue_number": created.number, "title": created.title},
        )
        self.attach_to_board(created)
        return Outcome.created(target=repo, title=candidate.title, url=created.url)
