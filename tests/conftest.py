"""Test configuration and fixtures."""

from unittest.mock import Mock

import pytest

from issue_seeder.github.client import GitHubClient, RepositoryMetadata
from issue_seeder.models import CandidateIssue, TargetRepository


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer credentials and settings out of tests."""
    for name in (
        "SEEDER_GITHUB_TOKEN",
        "GITHUB_TOKEN",
        "GITHUB_BASE_URL",
        "LOG_LEVEL",
        "DELAY_BETWEEN_REQUESTS",
        "DRY_RUN",
        "ISSUE_TEMPLATE_PATH",
        "SOURCE_REPOSITORY",
        "EXCEL_FILE_PATH",
        "REPO_OWNER",
        "REPO_NAME",
        "PROJECT_NUMBER",
        "ROW_START",
        "ROW_END",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def target() -> TargetRepository:
    """Provide a test target repository."""
    return TargetRepository(owner="acme", name="widgets")


@pytest.fixture
def candidate() -> CandidateIssue:
    """Provide a test candidate issue."""
    return CandidateIssue(title="X", body="Y", labels=())


@pytest.fixture
def mock_github() -> Mock:
    """Provide a GitHub client mock whose repositories accept issues."""
    github = Mock(spec=GitHubClient)
    github.get_repository.return_value = RepositoryMetadata(
        full_name="acme/widgets", archived=False, has_issues=True
    )
    github.list_open_issues.return_value = []
    return github
