"""Human-readable progress lines and end-of-run summary."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from issue_seeder.models import Outcome, OutcomeKind

_HEADINGS: dict[OutcomeKind, str] = {
    OutcomeKind.CREATED: "Created",
    OutcomeKind.WOULD_CREATE: "Would create (dry run)",
    OutcomeKind.DUPLICATE: "Duplicates",
    OutcomeKind.SKIPPED: "Skipped",
    OutcomeKind.FAILED: "Failed",
}


def tally(outcomes: Sequence[Outcome]) -> dict[OutcomeKind, int]:
    counts = Counter(o.kind for o in outcomes)
    return {kind: counts.get(kind, 0) for kind in OutcomeKind}


def format_outcome_line(outcome: Outcome) -> str:
    if outcome.kind is OutcomeKind.CREATED:
        return f"created: {outcome.url}"
    if outcome.kind is OutcomeKind.WOULD_CREATE:
        return f"[dry run] would create {outcome.title!r}"
    if outcome.kind is OutcomeKind.DUPLICATE:
        return f"already exists: {outcome.url}"
    if outcome.kind is OutcomeKind.SKIPPED:
        return f"skipped ({outcome.reason})"
    return f"failed: {outcome.reason}"


def _detail(outcome: Outcome) -> str:
    label = outcome.title or "(untitled row)"
    if outcome.kind in {OutcomeKind.CREATED, OutcomeKind.DUPLICATE}:
        return f"{outcome.target}: {label} -> {outcome.url}"
    if outcome.kind is OutcomeKind.WOULD_CREATE:
        return f"{outcome.target}: {label}"
    return f"{outcome.target}: {label} ({outcome.reason})"


def render_summary(outcomes: Sequence[Outcome]) -> str:
    counts = tally(outcomes)
    lines = ["SUMMARY"]
    lines.extend(f"{_HEADINGS[kind]}: {counts[kind]}" for kind in OutcomeKind)

    for kind in OutcomeKind:
        selected = [o for o in outcomes if o.kind is kind]
        if not selected:
            continue
        lines.append("")
        lines.append(f"{_HEADINGS[kind]}:")
        lines.extend(f"  - {_detail(o)}" for o in selected)

    return "\n".join(lines)
