"""CLI entrypoint for the issue seeder.

Commands:
- broadcast:     open the template issue on every repository linked from a README
- list-targets:  show which repositories `broadcast` would visit
- import-ideas:  open one proposal issue per workbook row in a single repository
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import requests
from pydantic import ValidationError

from issue_seeder import __version__
from issue_seeder.batch import run_batch
from issue_seeder.config import SeederSettings
from issue_seeder.github.client import GitHubClient
from issue_seeder.github.issue_service import IssueService
from issue_seeder.logging import configure_logging
from issue_seeder.models import CandidateIssue, Outcome, TargetRepository
from issue_seeder.report import format_outcome_line, render_summary
from issue_seeder.sources.ideas import (
    IdeaRow,
    SpreadsheetError,
    build_candidate,
    find_duplicate_names,
    load_idea_rows,
    select_rows,
)
from issue_seeder.sources.references import DEFAULT_EXCLUDED_OWNERS, extract_repositories
from issue_seeder.sources.template import MalformedTemplate, load_issue_template

logger = logging.getLogger(__name__)


class FatalError(Exception):
    """A startup problem that stops the run before any issue is processed."""


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be created without creating anything (overrides DRY_RUN)",
    )
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=None,
        help="Pause between items in milliseconds (overrides DELAY_BETWEEN_REQUESTS)",
    )
    parser.add_argument(
        "--project-number",
        type=int,
        default=None,
        help="Organization project board to add created issues to (overrides PROJECT_NUMBER)",
    )


def _add_source_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--source-repo",
        default=None,
        help=(
            "Repository whose README lists the targets, 'owner/repo' "
            "(overrides SOURCE_REPOSITORY)"
        ),
    )
    parser.add_argument(
        "--exclude-owner",
        action="append",
        default=[],
        help="Additional link owner to ignore (repeatable), e.g. 'contact'",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="issue-seeder",
        description="Ensure GitHub issues exist for a template or an idea workbook",
    )
    parser.add_argument("--version", action="version", version=f"github-issue-seeder {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    broadcast = subparsers.add_parser(
        "broadcast",
        help="Open the template issue on every repository linked from the source README",
    )
    broadcast.add_argument(
        "--template",
        default=None,
        help="Front-matter issue template (overrides ISSUE_TEMPLATE_PATH)",
    )
    _add_source_options(broadcast)
    _add_run_options(broadcast)

    list_targets = subparsers.add_parser(
        "list-targets",
        help="Print the repositories linked from the source README",
    )
    _add_source_options(list_targets)

    import_ideas = subparsers.add_parser(
        "import-ideas",
        help="Open one proposal issue per row of an idea workbook",
    )
    import_ideas.add_argument(
        "--excel",
        default=None,
        help="Workbook path (overrides EXCEL_FILE_PATH)",
    )
    import_ideas.add_argument(
        "--repo",
        "--repository",
        dest="repository",
        default=None,
        help="Target repository 'owner/repo' (overrides REPO_OWNER/REPO_NAME)",
    )
    import_ideas.add_argument(
        "--start",
        type=int,
        default=None,
        help="First row to process, 0-based inclusive (overrides ROW_START)",
    )
    import_ideas.add_argument(
        "--end",
        type=int,
        default=None,
        help="Row to stop at, 0-based exclusive (overrides ROW_END)",
    )
    _add_run_options(import_ideas)

    return parser


def _apply_overrides(settings: SeederSettings, args: argparse.Namespace) -> SeederSettings:
    updates: dict[str, Any] = {}
    if getattr(args, "dry_run", False):
        updates["dry_run"] = True
    if getattr(args, "delay_ms", None) is not None:
        if args.delay_ms < 0:
            raise FatalError("--delay-ms must be non-negative")
        updates["delay_ms"] = args.delay_ms
    if getattr(args, "project_number", None) is not None:
        if args.project_number <= 0:
            raise FatalError("--project-number must be a positive integer")
        updates["project_number"] = args.project_number
    if getattr(args, "template", None):
        updates["issue_template_path"] = Path(args.template)
    if getattr(args, "source_repo", None):
        updates["source_repository"] = args.source_repo
    if getattr(args, "excel", None):
        updates["excel_file_path"] = Path(args.excel)
    if getattr(args, "start", None) is not None:
        updates["row_start"] = args.start
    if getattr(args, "end", None) is not None:
        updates["row_end"] = args.end
    return settings.model_copy(update=updates) if updates else settings


def _source_repository(settings: SeederSettings) -> TargetRepository:
    try:
        return settings.source
    except ValueError as e:
        raise FatalError(f"Invalid source repository: {e}") from e


def _discover_targets(
    github: GitHubClient, settings: SeederSettings, extra_excluded: Sequence[str]
) -> list[TargetRepository]:
    source = _source_repository(settings)
    try:
        readme = github.get_readme(source)
    except (requests.RequestException, FileNotFoundError) as e:
        raise FatalError(f"Could not fetch README of {source.full_name}: {e}") from e

    logger.info("README fetched", extra={"repo": source.full_name, "chars": len(readme)})
    return extract_repositories(
        readme,
        source=source,
        excluded_owners=DEFAULT_EXCLUDED_OWNERS | frozenset(extra_excluded),
    )


def _resolve_board(github: GitHubClient, settings: SeederSettings, owner: str) -> str | None:
    if settings.project_number is None:
        return None
    try:
        board = github.get_project_id(owner=owner, number=settings.project_number)
    except (requests.RequestException, RuntimeError, ValueError) as e:
        logger.warning(
            "Project board lookup failed",
            extra={"owner": owner, "project_number": settings.project_number, "error": str(e)},
        )
        board = None

    if board is None:
        print(
            f"Could not find project #{settings.project_number} for {owner}; "
            "issues will be created without a board."
        )
        return None

    print(f"Created issues will be added to project #{settings.project_number}: {board.title}")
    return board.id


def _print_progress(position: int, total: int, outcome: Outcome) -> None:
    print(f"  -> {format_outcome_line(outcome)}")


def _run_broadcast(
    github: GitHubClient, settings: SeederSettings, args: argparse.Namespace
) -> int:
    try:
        template = load_issue_template(settings.issue_template_path)
    except MalformedTemplate as e:
        raise FatalError(str(e)) from e

    if settings.dry_run:
        print("DRY RUN: no issues will be created")
    print(f"Issue title: {template.title}")
    print(f"Issue labels: {', '.join(template.labels) or '(none)'}")

    targets = _discover_targets(github, settings, args.exclude_owner)
    print(f"Found {len(targets)} unique repositories")
    if not targets:
        return 0

    project_id = _resolve_board(github, settings, settings.repo_owner)
    service = IssueService(github=github, dry_run=settings.dry_run, project_id=project_id)

    def on_start(position: int, total: int, target: TargetRepository) -> None:
        print(f"[{position}/{total}] {target.full_name}")

    outcomes = run_batch(
        targets,
        lambda target: service.reconcile(template, target),
        delay_seconds=settings.delay_seconds,
        on_start=on_start,
        on_outcome=_print_progress,
    )
    print()
    print(render_summary(outcomes))
    return 0


def _run_list_targets(
    github: GitHubClient, settings: SeederSettings, args: argparse.Namespace
) -> int:
    targets = _discover_targets(github, settings, args.exclude_owner)
    for position, target in enumerate(targets, start=1):
        print(f"{position}. {target.full_name}")
    print(f"{len(targets)} repositories")
    return 0


def _idea_repository(settings: SeederSettings, args: argparse.Namespace) -> TargetRepository:
    if args.repository:
        try:
            return TargetRepository.parse(args.repository)
        except ValueError as e:
            raise FatalError(str(e)) from e
    repo = settings.idea_repository
    if repo is None:
        raise FatalError("REPO_NAME is not set (or pass --repo owner/repo)")
    return repo


def _load_rows(settings: SeederSettings) -> list[IdeaRow]:
    if settings.excel_file_path is None:
        raise FatalError("EXCEL_FILE_PATH is not set (or pass --excel PATH)")
    try:
        return load_idea_rows(settings.excel_file_path)
    except (FileNotFoundError, SpreadsheetError) as e:
        raise FatalError(str(e)) from e


def _run_import_ideas(
    github: GitHubClient, settings: SeederSettings, args: argparse.Namespace
) -> int:
    repo = _idea_repository(settings, args)
    rows = _load_rows(settings)
    print(f"Loaded {len(rows)} ideas from {settings.excel_file_path}")

    duplicates = find_duplicate_names(rows)
    if duplicates:
        print(f"Found {len(duplicates)} duplicate idea name(s) in the workbook:")
        for duplicate in duplicates:
            rows_text = ", ".join(str(n) for n in duplicate.rows)
            print(f"  {duplicate.name!r} appears in rows: {rows_text}")
    else:
        print("No duplicate idea names found.")

    try:
        selected = select_rows(rows, settings.row_start, settings.row_end)
    except ValueError as e:
        raise FatalError(str(e)) from e
    if len(selected) != len(rows):
        print(f"Processing rows {settings.row_start + 1} to {settings.row_start + len(selected)}")

    if settings.dry_run:
        print("DRY RUN: no issues will be created")

    project_id = _resolve_board(github, settings, repo.owner)
    service = IssueService(github=github, dry_run=settings.dry_run, project_id=project_id)

    def reconcile_row(row: IdeaRow) -> Outcome:
        candidate: CandidateIssue = build_candidate(row)
        return service.reconcile(candidate, repo)

    def on_start(position: int, total: int, row: IdeaRow) -> None:
        print(f"[{position}/{total}] row {row.row_number}: {row.name or '(no idea name)'}")

    outcomes = run_batch(
        selected,
        reconcile_row,
        delay_seconds=settings.delay_seconds,
        on_start=on_start,
        on_outcome=_print_progress,
    )
    print()
    print(render_summary(outcomes))
    return 0


_COMMANDS = {
    "broadcast": _run_broadcast,
    "list-targets": _run_list_targets,
    "import-ideas": _run_import_ideas,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = SeederSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    github: GitHubClient | None = None
    try:
        settings = _apply_overrides(settings, args)
        github = GitHubClient(token=settings.github_token, base_url=settings.github_base_url)
        return _COMMANDS[args.command](github, settings, args)

    except FatalError as e:
        logger.error(str(e), extra={"command": args.command})
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except Exception:
        logger.exception("Command failed")
        return 1

    finally:
        if github is not None:
            github.close()


if __name__ == "__main__":
    raise SystemExit(main())
