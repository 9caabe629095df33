#!/usr/bin/env python3
"""Programmatic seeding example.

This demonstrates using the seeder components directly:

* load settings from `.env`
* parse a front-matter issue template
* reconcile it against a few repositories given on the command line

Dry-run is on unless `--create` is passed.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from issue_seeder.batch import run_batch
from issue_seeder.config import SeederSettings
from issue_seeder.github.client import GitHubClient
from issue_seeder.github.issue_service import IssueService
from issue_seeder.logging import configure_logging
from issue_seeder.models import TargetRepository
from issue_seeder.report import render_summary
from issue_seeder.sources.template import load_issue_template


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconcile a template issue (programmatic example)."
    )
    parser.add_argument("repos", nargs="+", help='Target repositories in the form "owner/repo"')
    parser.add_argument("--template", default="issue-template.md", help="Issue template path")
    parser.add_argument("--create", action="store_true", help="Actually create the issues")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = SeederSettings()
    configure_logging(settings.log_level)

    template = load_issue_template(Path(args.template))
    targets = [TargetRepository.parse(repo) for repo in args.repos]

    github = GitHubClient(token=settings.github_token, base_url=settings.github_base_url)
    try:
        service = IssueService(github=github, dry_run=not args.create)
        outcomes = run_batch(
            targets,
            lambda target: service.reconcile(template, target),
            delay_seconds=settings.delay_seconds,
        )
    finally:
        github.close()

    print(render_summary(outcomes))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
