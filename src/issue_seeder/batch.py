"""Sequential batch driver with fixed pacing between items."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import TypeVar

from issue_seeder.models import Outcome

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_batch(
    items: Sequence[T],
    process: Callable[[T], Outcome],
    *,
    delay_seconds: float,
    sleep: Callable[[float], None] = time.sleep,
    on_start: Callable[[int, int, T], None] | None = None,
    on_outcome: Callable[[int, int, Outcome], None] | None = None,
) -> list[Outcome]:
    """Process items one at a time, in order.

    `sleep(delay_seconds)` runs between consecutive items (N-1 times for N items),
    never after the last one. Callbacks receive 1-based positions.
    """

    outcomes: list[Outcome] = []
    total = len(items)

    for position, item in enumerate(items, start=1):
        if on_start is not None:
            on_start(position, total, item)

        outcome = process(item)
        outcomes.append(outcome)
        logger.debug(
            "Batch item processed",
            extra={"position": position, "total": total, "outcome": outcome.kind.value},
        )

        if on_outcome is not None:
            on_outcome(position, total, outcome)

        if position < total and delay_seconds > 0:
            sleep(delay_seconds)

    return outcomes
