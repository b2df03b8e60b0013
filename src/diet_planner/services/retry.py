"""Retry helper for optimistic-concurrency updates."""

import logging
from collections.abc import Callable
from typing import TypeVar

from diet_planner.errors import ConcurrentUpdateError

_logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_on_conflict(func: Callable[[], T], *, attempts: int, action: str) -> T:
    """Call func, re-running it when a versioned write loses a race.

    func must reload whatever it writes so each attempt starts from fresh state.
    """
    attempt = 0
    while True:
        try:
            return func()
        except ConcurrentUpdateError as exc:
            attempt += 1
            _logger.warning(
                "Version conflict during %s: attempt=%s/%s", action, attempt, attempts
            )
            if attempt >= attempts:
                raise ConcurrentUpdateError(
                    f"Gave up on {action} after {attempts} conflicting attempts",
                    {"action": action, "attempts": attempts},
                ) from exc
