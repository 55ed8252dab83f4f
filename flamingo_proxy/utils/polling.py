# =============================================
# File: flamingo_proxy/utils/polling.py
# Purpose: Fixed-interval poll loop with an optional wall-clock deadline
# =============================================
from __future__ import annotations

import time
from typing import Callable, Optional, Tuple, TypeVar

T = TypeVar("T")


class PollTimeout(Exception):
    def __init__(self, last: object, attempts: int):
        super().__init__(f"still pending after {attempts} polls")
        self.last = last
        self.attempts = attempts


def poll_until(
    fetch: Callable[[], T],
    is_pending: Callable[[T], bool],
    interval: float,
    timeout: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Tuple[T, int]:
    """
    Call ``fetch`` until ``is_pending`` is False.
    Returns (last value, number of fetches). The first fetch happens immediately;
    each later one waits ``interval`` seconds. With ``timeout`` set, raises
    PollTimeout once the deadline passes while the value is still pending.
    Exceptions from ``fetch`` propagate unchanged (no retry).
    """
    deadline = None if timeout is None else clock() + timeout
    value = fetch()
    attempts = 1
    while is_pending(value):
        if deadline is not None and clock() >= deadline:
            raise PollTimeout(value, attempts)
        sleep(interval)
        value = fetch()
        attempts += 1
    return value, attempts
