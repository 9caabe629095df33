"""Value types shared by the parsers, the issue service and the reporter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

SKIP_NOT_FOUND = "not found"
SKIP_ARCHIVED = "archived"
SKIP_ISSUES_DISABLED = "issues disabled"
SKIP_EMPTY_NAME = "empty idea/name field"


@dataclass(frozen=True, slots=True)
class CandidateIssue:
    """An issue that should exist on a target repository."""

    title: str
    body: str
    labels: tuple[str, ...] = ()

    @property
    def is_actionable(self) -> bool:
        return bool(self.title.strip())


@dataclass(frozen=True, slots=True)
class TargetRepository:
    """A repository that may receive an issue ("owner/name")."""

    owner: str
    name: str

    @classmethod
    def parse(cls, value: str) -> TargetRepository:
        """Parse an ``owner/name`` string.

        Raises:
            ValueError: if the value is not of the form ``owner/name``.
        """

        parts = value.strip().strip("/").split("/")
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            raise ValueError(f"repository must be in the form 'owner/repo', got {value!r}")
        return cls(owner=parts[0].strip(), name=parts[1].strip())

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def html_url(self, host: str = "github.com") -> str:
        return f"https://{host}/{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


class TargetState(str, Enum):
    """Whether a repository currently accepts new issues."""

    NOT_FOUND = "not_found"
    ARCHIVED = "archived"
    ISSUES_DISABLED = "issues_disabled"
    OPEN = "open"


class OutcomeKind(str, Enum):
    CREATED = "created"
    WOULD_CREATE = "would_create"
    DUPLICATE = "duplicate"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of reconciling one candidate against one repository.

    ``url`` is set for created and duplicate outcomes, ``reason`` for skipped
    and failed ones.
    """

    kind: OutcomeKind
    target: str
    title: str
    url: str | None = None
    reason: str | None = None

    @classmethod
    def created(cls, *, target: str, title: str, url: str) -> Outcome:
        return cls(kind=OutcomeKind.CREATED, target=target, title=title, url=url)

    @classmethod
    def would_create(cls, *, target: str, title: str) -> Outcome:
        return cls(kind=OutcomeKind.WOULD_CREATE, target=target, title=title)

    @classmethod
    def duplicate(cls, *, target: str, title: str, url: str) -> Outcome:
        return cls(kind=OutcomeKind.DUPLICATE, target=target, title=title, url=url)

    @classmethod
    def skipped(cls, *, target: str, title: str, reason: str) -> Outcome:
        return cls(kind=OutcomeKind.SKIPPED, target=target, title=title, reason=reason)

    @classmethod
    def failed(cls, *, target: str, title: str, reason: str) -> Outcome:
        return cls(kind=OutcomeKind.FAILED, target=target, title=title, reason=reason)
