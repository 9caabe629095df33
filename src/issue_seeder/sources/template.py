"""Parse a front-matter issue template.

Expected shape::

    ---
    title: Add a security policy
    labels:
      - documentation
      - good first issue
    ---
    Body in markdown.

Only `title` and `labels` are read from the front matter; other keys are ignored.
Only this fixed subset of YAML is understood.
"""

from __future__ import annotations

import re
from pathlib import Path

from issue_seeder.models import CandidateIssue

_FRONT_MATTER_RE = re.compile(
    r"\A---[ \t]*\n(?P<front>.*?)\n---[ \t]*(?:\n(?P<body>.*))?\Z", re.DOTALL
)
_TITLE_RE = re.compile(r"^title:[ \t]*(?P<value>.+)$", re.MULTILINE)
_LABELS_BLOCK_RE = re.compile(
    r"^labels:[ \t]*\n(?P<items>(?:[ \t]*-[ \t]*.+(?:\n|$))+)", re.MULTILINE
)
_LABELS_INLINE_RE = re.compile(r"^labels:[ \t]*(?P<value>\S.*)$", re.MULTILINE)
_LIST_ITEM_PREFIX_RE = re.compile(r"^[ \t]*-[ \t]*")


class MalformedTemplate(ValueError):
    """Raised when an issue template cannot be turned into an issue."""


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1].strip()
    return value


def _normalize(text: str) -> str:
    return text.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")


def parse_labels(front_matter: str) -> tuple[str, ...]:
    """Extract labels from a block list or an inline comma-separated value."""

    block = _LABELS_BLOCK_RE.search(front_matter)
    if block:
        items = (_LIST_ITEM_PREFIX_RE.sub("", line) for line in block.group("items").split("\n"))
        return tuple(label for label in (_unquote(i) for i in items) if label)

    inline = _LABELS_INLINE_RE.search(front_matter)
    if inline:
        value = inline.group("value").strip()
        if value.startswith("[") and value.endswith("]"):
            value = value[1:-1]
        return tuple(label for label in (_unquote(p) for p in value.split(",")) if label)

    return ()


def parse_issue_template(text: str) -> CandidateIssue:
    """Parse template text into a candidate issue.

    Raises:
        MalformedTemplate: when the front matter is missing, has no title, or the
            body is empty.
    """

    match = _FRONT_MATTER_RE.match(_normalize(text))
    if match is None:
        raise MalformedTemplate("issue template must start with front matter between '---' lines")

    front_matter = match.group("front")
    body = (match.group("body") or "").strip()

    title_match = _TITLE_RE.search(front_matter)
    title = _unquote(title_match.group("value")) if title_match else ""
    if not title:
        raise MalformedTemplate("issue template is missing a title in front matter")

    if not body:
        raise MalformedTemplate("issue template has no body content after front matter")

    return CandidateIssue(title=title, body=body, labels=parse_labels(front_matter))


def load_issue_template(path: Path) -> CandidateIssue:
    """Read and parse a template file; a missing file is reported as malformed."""

    if not path.is_file():
        raise MalformedTemplate(f"issue template not found: {path}")
    return parse_issue_template(path.read_text(encoding="utf-8"))
