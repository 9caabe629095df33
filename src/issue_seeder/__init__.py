"""GitHub Issue Seeder.

Ensures GitHub issues exist in bulk:
- one templated issue broadcast to every repository listed in a curated README
- one proposal issue per row of an Excel idea sheet

Every run re-derives idempotency from GitHub (open issues with the same title).
"""

__version__ = "0.1.0"

from issue_seeder.config import SeederSettings

__all__ = ["__version__", "SeederSettings"]
