"""Configuration for the issue seeder.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The settings object is frozen: it is built once at startup and passed explicitly
to the components that need it. CLI flags override individual values through
`model_copy(update=...)`.

The token is read from `SEEDER_GITHUB_TOKEN`, falling back to `GITHUB_TOKEN`.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from issue_seeder.models import TargetRepository


class SeederSettings(BaseSettings):
    """Settings for a seeding run.

    Environment variables:
    - SEEDER_GITHUB_TOKEN / GITHUB_TOKEN
    - GITHUB_BASE_URL         (optional)
    - LOG_LEVEL               (optional)
    - DELAY_BETWEEN_REQUESTS  (optional, milliseconds)
    - DRY_RUN                 (optional)
    - ISSUE_TEMPLATE_PATH     (broadcast)
    - SOURCE_REPOSITORY       (broadcast)
    - EXCEL_FILE_PATH         (import-ideas)
    - REPO_OWNER / REPO_NAME  (import-ideas)
    - PROJECT_NUMBER          (optional board)
    - ROW_START / ROW_END     (optional row range)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `SeederSettings(_env_file=path_to_env)`.
    """

    github_token: str = Field(
        default="",
        validation_alias=AliasChoices("SEEDER_GITHUB_TOKEN", "GITHUB_TOKEN"),
        description="GitHub token used for API authentication",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    delay_ms: int = Field(
        default=3000,
        ge=0,
        validation_alias="DELAY_BETWEEN_REQUESTS",
        description="Pause between two consecutive candidates, in milliseconds",
    )
    dry_run: bool = Field(
        default=False,
        validation_alias="DRY_RUN",
        description="Compute and report every decision without creating issues",
    )

    issue_template_path: Path = Field(
        default=Path("issue-template.md"),
        validation_alias="ISSUE_TEMPLATE_PATH",
        description="Front-matter issue template used by the broadcast command",
    )
    source_repository: str = Field(
        default="midnightntwrk/midnight-awesome-dapps",
        validation_alias="SOURCE_REPOSITORY",
        description="Repository whose README lists the broadcast targets ('owner/repo')",
    )

    excel_file_path: Path | None = Field(
        default=None,
        validation_alias="EXCEL_FILE_PATH",
        description="Workbook read by the import-ideas command",
    )
    repo_owner: str = Field(
        default="midnightntwrk",
        validation_alias="REPO_OWNER",
        description="Owner (organization) of the import-ideas repository and project board",
    )
    repo_name: str = Field(
        default="",
        validation_alias="REPO_NAME",
        description="Repository receiving imported ideas",
    )
    project_number: int | None = Field(
        default=None,
        gt=0,
        validation_alias="PROJECT_NUMBER",
        description="Organization Projects (v2) board number; unset disables board attachment",
    )

    row_start: int = Field(
        default=0,
        ge=0,
        validation_alias="ROW_START",
        description="First idea row to process (0-based, inclusive)",
    )
    row_end: int | None = Field(
        default=None,
        ge=0,
        validation_alias="ROW_END",
        description="Idea row to stop at (0-based, exclusive); unset processes to the end",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _known_log_level(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(
                f"unknown log level {value!r} (use DEBUG, INFO, WARNING, ERROR or CRITICAL)"
            )
        return level

    @model_validator(mode="after")
    def _require_github_auth(self) -> SeederSettings:
        if not self.github_token.strip():
            raise ValueError("SEEDER_GITHUB_TOKEN (or GITHUB_TOKEN) is required")
        return self

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000

    @property
    def source(self) -> TargetRepository:
        return TargetRepository.parse(self.source_repository)

    @property
    def idea_repository(self) -> TargetRepository | None:
        """The import-ideas target, or None when REPO_NAME is not configured."""

        if not self.repo_name.strip():
            return None
        return TargetRepository(owner=self.repo_owner.strip(), name=self.repo_name.strip())
