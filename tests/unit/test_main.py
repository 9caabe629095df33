"""CLI tests: full runs against a mocked GitHub client."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock

import pandas as pd
import pytest

from issue_seeder import main as cli
from issue_seeder.github.client import CreatedIssue, ProjectBoard, RepositoryMetadata
from issue_seeder.models import TargetRepository
from issue_seeder.sources.ideas import COLUMN_DESCRIPTION, COLUMN_NAME

README = """# Awesome dApps

- [Bulletin board](https://github.com/acme/widgets) - a demo
- [Old thing](https://github.com/acme/legacy)
- [App](https://github.com/apps/some-bot)
- [Self](https://github.com/midnightntwrk/midnight-awesome-dapps)
- [Bulletin board again](https://github.com/acme/widgets)
"""

TEMPLATE = """---
title: Add your dApp to the showcase
labels:
  - showcase
---
Hello maintainers!
"""


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    monkeypatch.setenv("DELAY_BETWEEN_REQUESTS", "0")
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)
    return tmp_path


@pytest.fixture
def github(mock_github: Mock, monkeypatch: pytest.MonkeyPatch) -> Mock:
    def get_repository(target: TargetRepository) -> RepositoryMetadata:
        return RepositoryMetadata(
            full_name=target.full_name,
            archived=target.name == "legacy",
            has_issues=True,
        )

    def create_issue(target: TargetRepository, *, title: str, body: str, labels: tuple[str, ...]) -> CreatedIssue:
        return CreatedIssue(
            repository=target.full_name,
            number=1,
            title=title,
            url=f"https://github.com/{target.full_name}/issues/1",
            node_id="I_1",
        )

    mock_github.get_readme.return_value = README
    mock_github.get_repository.side_effect = get_repository
    mock_github.create_issue.side_effect = create_issue
    monkeypatch.setattr(cli, "GitHubClient", lambda **kwargs: mock_github)
    return mock_github


def test_missing_token_exits_with_config_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)

    assert cli.main(["broadcast"]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_unknown_log_level_exits_with_config_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    monkeypatch.setenv("LOG_LEVEL", "loud")

    assert cli.main(["list-targets"]) == 2
    err = capsys.readouterr().err
    assert "Configuration error" in err
    assert "unknown log level" in err


def test_broadcast_creates_issue_on_each_open_repository(
    workspace: Path, github: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    (workspace / "issue-template.md").write_text(TEMPLATE, encoding="utf-8")

    assert cli.main(["broadcast"]) == 0

    github.get_readme.assert_called_once_with(
        TargetRepository(owner="midnightntwrk", name="midnight-awesome-dapps")
    )
    github.create_issue.assert_called_once_with(
        TargetRepository(owner="acme", name="widgets"),
        title="Add your dApp to the showcase",
        body="Hello maintainers!",
        labels=("showcase",),
    )
    out = capsys.readouterr().out
    assert "Found 2 unique repositories" in out
    assert "Created: 1" in out
    assert "acme/legacy: Add your dApp to the showcase (archived)" in out
    github.close.assert_called_once()


def test_broadcast_dry_run_creates_nothing(
    workspace: Path, github: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    (workspace / "issue-template.md").write_text(TEMPLATE, encoding="utf-8")

    assert cli.main(["broadcast", "--dry-run"]) == 0

    github.create_issue.assert_not_called()
    assert "Would create (dry run): 1" in capsys.readouterr().out


def test_broadcast_with_malformed_template_stops_before_any_request(
    workspace: Path, github: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    (workspace / "issue-template.md").write_text("no front matter here\n", encoding="utf-8")

    assert cli.main(["broadcast"]) == 1

    github.get_readme.assert_not_called()
    assert "front matter" in capsys.readouterr().err


def test_broadcast_missing_template(workspace: Path, github: Mock) -> None:
    assert cli.main(["broadcast", "--template", "nope.md"]) == 1
    github.get_readme.assert_not_called()


def test_list_targets_prints_discovered_repositories(
    workspace: Path, github: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.main(["list-targets"]) == 0

    out = capsys.readouterr().out
    assert "1. acme/widgets\n2. acme/legacy\n" in out
    github.create_issue.assert_not_called()


def _write_ideas(path: Path) -> None:
    frame = pd.DataFrame(
        [
            {COLUMN_NAME: "Private DEX", COLUMN_DESCRIPTION: "Swap privately"},
            {COLUMN_NAME: "", COLUMN_DESCRIPTION: "Orphan description"},
            {COLUMN_NAME: "private dex", COLUMN_DESCRIPTION: "Same idea"},
        ]
    )
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name="Ideas", index=False)


def test_import_ideas_end_to_end(
    workspace: Path, github: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    _write_ideas(workspace / "ideas.xlsx")
    github.get_project_id.return_value = ProjectBoard(id="PVT_1", title="Community ideas")

    code = cli.main(
        [
            "import-ideas",
            "--excel",
            "ideas.xlsx",
            "--repo",
            "midnightntwrk/contributor-hub",
            "--project-number",
            "36",
        ]
    )

    assert code == 0
    titles = [call.kwargs["title"] for call in github.create_issue.call_args_list]
    assert titles == ["[dApp Proposal] Private DEX", "[dApp Proposal] private dex"]
    assert github.get_repository.call_count == 2
    assert github.add_item_to_project.call_count == 2
    github.get_project_id.assert_called_once_with(owner="midnightntwrk", number=36)

    out = capsys.readouterr().out
    assert "'Private DEX' appears in rows: 2, 4" in out
    assert "skipped (empty idea/name field)" in out
    assert "Created: 2" in out


def test_import_ideas_row_range(workspace: Path, github: Mock) -> None:
    _write_ideas(workspace / "ideas.xlsx")

    code = cli.main(
        ["import-ideas", "--excel", "ideas.xlsx", "--repo", "acme/ideas", "--start", "2", "--end", "3"]
    )

    assert code == 0
    titles = [call.kwargs["title"] for call in github.create_issue.call_args_list]
    assert titles == ["[dApp Proposal] private dex"]


@pytest.mark.parametrize("bounds", [["--start", "50"], ["--start", "2", "--end", "1"]])
def test_import_ideas_rejects_range_outside_the_workbook(
    workspace: Path, github: Mock, capsys: pytest.CaptureFixture[str], bounds: list[str]
) -> None:
    _write_ideas(workspace / "ideas.xlsx")

    code = cli.main(["import-ideas", "--excel", "ideas.xlsx", "--repo", "acme/ideas", *bounds])

    assert code == 1
    assert "row range" in capsys.readouterr().err
    github.get_repository.assert_not_called()
    github.create_issue.assert_not_called()


def test_import_ideas_requires_repository(
    workspace: Path, github: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    _write_ideas(workspace / "ideas.xlsx")

    assert cli.main(["import-ideas", "--excel", "ideas.xlsx"]) == 1
    assert "REPO_NAME" in capsys.readouterr().err
    github.create_issue.assert_not_called()


def test_import_ideas_missing_workbook(
    workspace: Path, github: Mock, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("REPO_NAME", "contributor-hub")

    assert cli.main(["import-ideas", "--excel", "missing.xlsx"]) == 1
    github.get_repository.assert_not_called()
