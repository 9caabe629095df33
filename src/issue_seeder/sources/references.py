"""Discover repositories linked from a README-like document."""

from __future__ import annotations

import re
from collections.abc import Iterable

from issue_seeder.models import TargetRepository

# First path segments on github.com that are not user or organization accounts.
DEFAULT_EXCLUDED_OWNERS: frozenset[str] = frozenset({"apps", "topics", "orgs"})

_SEGMENT = r"[A-Za-z0-9_.-]+"


def _repository_link_pattern(host: str, *, require_boundary: bool) -> re.Pattern[str]:
    pattern = rf"https://{re.escape(host)}/(?P<owner>{_SEGMENT})/(?P<name>{_SEGMENT})"
    if require_boundary:
        # Links to files (/blob/..., /tree/...) or deeper paths do not end here.
        pattern += r"(?=[)\]\s]|\Z)"
    return re.compile(pattern)


def extract_repositories(
    text: str,
    *,
    host: str = "github.com",
    source: TargetRepository | None = None,
    excluded_owners: Iterable[str] = DEFAULT_EXCLUDED_OWNERS,
    require_boundary: bool = True,
) -> list[TargetRepository]:
    """Return linked repositories in first-seen order.

    Duplicates, owners in `excluded_owners` and the `source` repository itself
    are dropped.
    """

    excluded = frozenset(excluded_owners)
    seen: set[TargetRepository] = set()
    found: list[TargetRepository] = []

    for match in _repository_link_pattern(host, require_boundary=require_boundary).finditer(text):
        repo = TargetRepository(owner=match.group("owner"), name=match.group("name"))
        if repo in seen or repo.owner in excluded or repo == source:
            continue
        seen.add(repo)
        found.append(repo)

    return found
