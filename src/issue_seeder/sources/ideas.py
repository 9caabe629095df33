"""Turn rows of an idea workbook into proposal issues.

Every sheet of the workbook is read (in workbook order) and each row becomes a
mapping from column header to cell text. The body of each issue is rendered from
a fixed markdown template; blank cells are replaced by placeholder text.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from issue_seeder.models import CandidateIssue

logger = logging.getLogger(__name__)

COLUMN_NAME = "dApp idea/use case"
COLUMN_VERTICAL = "Vertical"
COLUMN_DESCRIPTION = "Description"
COLUMN_WHY = "Why Midnight? / How does Midnight fit?"
COLUMN_EXISTING_EXAMPLES = "Existing examples"
COLUMN_BUILT_BEFORE = "Has it been built before?"
COLUMN_EXAMPLES = "Examples?"

TITLE_PREFIX = "[dApp Proposal] "
PROPOSAL_LABELS: tuple[str, ...] = ("dapp proposal", "idea", "community")

TBD = "To be determined"
NOT_APPLICABLE = "N/A"

# Spreadsheet row of the first data record (row 1 holds the headers).
FIRST_DATA_ROW = 2


class SpreadsheetError(RuntimeError):
    """Raised when the idea workbook cannot be read."""


@dataclass(frozen=True, slots=True)
class IdeaRow:
    """One non-blank workbook row."""

    sheet: str
    index: int
    values: Mapping[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.values.get(COLUMN_NAME, "").strip()

    @property
    def row_number(self) -> int:
        """Position reported to people: 1-based, counting the header row."""

        return self.index + FIRST_DATA_ROW


@dataclass(frozen=True, slots=True)
class DuplicateName:
    name: str
    rows: tuple[int, ...]


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value).strip()


def load_idea_rows(path: Path) -> list[IdeaRow]:
    """Read every sheet of a workbook, concatenated in sheet order.

    Raises:
        FileNotFoundError: if the workbook does not exist.
        SpreadsheetError: if the workbook cannot be parsed.
    """

    if not path.is_file():
        raise FileNotFoundError(f"Workbook not found: {path}")

    try:
        sheets: dict[str, pd.DataFrame] = pd.read_excel(
            path, sheet_name=None, dtype=str, keep_default_na=False
        )
    except Exception as e:
        raise SpreadsheetError(f"Could not read workbook {path}: {e}") from e

    rows: list[IdeaRow] = []
    for sheet_name, frame in sheets.items():
        sheet_rows = 0
        for record in frame.to_dict(orient="records"):
            values = {str(k).strip(): _cell_text(v) for k, v in record.items()}
            if not any(values.values()):
                continue
            rows.append(IdeaRow(sheet=str(sheet_name), index=len(rows), values=values))
            sheet_rows += 1
        logger.info("Sheet loaded", extra={"sheet": sheet_name, "rows": sheet_rows})

    return rows


def select_rows(rows: Sequence[IdeaRow], start: int = 0, end: int | None = None) -> list[IdeaRow]:
    """Return rows[start:end]; bounds are 0-based and end-exclusive.

    Raises:
        ValueError: when a bound is negative or the range lies outside the rows.
    """

    if start < 0 or (end is not None and end < 0):
        raise ValueError("row range bounds must be non-negative")
    if start > 0 and start >= len(rows):
        raise ValueError(f"row range start {start} is past the last row ({len(rows)} rows)")
    if end is not None and end <= start:
        raise ValueError(f"row range end {end} must be after start {start}")
    return list(rows[start:end])


def _or(value: str, placeholder: str = TBD) -> str:
    return value if value.strip() else placeholder


def format_proposal_body(values: Mapping[str, str]) -> str:
    """Render the proposal issue body for one idea row."""

    def get(column: str) -> str:
        return values.get(column, "").strip()

    name = get(COLUMN_NAME) or "Unnamed dApp"
    vertical = get(COLUMN_VERTICAL) or "General"
    description = _or(get(COLUMN_DESCRIPTION))
    why = _or(get(COLUMN_WHY))

    return f"""**Give your dApp a name or working title:** {name}

**One-sentence summary of the idea:** {description}

### 🔍 Problem Statement
**What problem does this solve or what opportunity does it unlock?**
{description}

**Why does this dApp need to exist? What user pain or need is it addressing?**
{why}

### 🌐 Target Users
**Who would use this dApp?**
To be determined based on use case analysis

**How would they benefit from Midnight's data-protection features?**
To be determined based on use case requirements

### 🔧 Core Functionality
**What are the key features or actions users would take in the app?**
Based on the concept: {description}

**Key features to be developed:**
To be assessed based on requirements analysis

### 🔐 Privacy & ZK Usage
**How would you leverage Midnight's privacy features or zero-knowledge technology?**
{why}

### 📦 Technical Considerations
**Do you have a preferred tech stack or prior implementation?**
- Frontend: {TBD}
- Smart contracts: {TBD}
- Backend: {TBD}

**Any integrations or infrastructure required?**
- Additional requirements to be assessed

### 📈 Maturity & Next Steps
- [x] Idea stage
- [ ] I'm building this and want feedback
- [ ] I'm looking for collaborators
- [ ] I'd like help from the Midnight team

### 🔗 Related Resources
**Has it been built before?** {_or(get(COLUMN_BUILT_BEFORE))}

**Existing examples in the space:** {_or(get(COLUMN_EXISTING_EXAMPLES), NOT_APPLICABLE)}

**Examples:** {_or(get(COLUMN_EXAMPLES), NOT_APPLICABLE)}

**Additional resources:** {TBD}

---
*Vertical: {vertical}*"""


def build_candidate(row: IdeaRow) -> CandidateIssue:
    """Build the proposal issue for a row.

    A row without an idea name yields a candidate with an empty title, which the
    issue service reports as skipped.
    """

    if not row.name:
        return CandidateIssue(title="", body="", labels=())
    return CandidateIssue(
        title=f"{TITLE_PREFIX}{row.name}",
        body=format_proposal_body(row.values),
        labels=PROPOSAL_LABELS,
    )


def find_duplicate_names(rows: Iterable[IdeaRow]) -> list[DuplicateName]:
    """Group rows sharing an idea name (case-insensitive, trimmed).

    Groups are returned in order of first appearance and keep the spelling of the
    first occurrence.
    """

    groups: dict[str, tuple[str, list[int]]] = {}
    for row in rows:
        if not row.name:
            continue
        key = row.name.lower()
        if key not in groups:
            groups[key] = (row.name, [])
        groups[key][1].append(row.row_number)

    return [
        DuplicateName(name=name, rows=tuple(numbers))
        for name, numbers in groups.values()
        if len(numbers) > 1
    ]
