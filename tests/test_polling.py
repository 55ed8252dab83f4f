# =============================================
# File: tests/test_polling.py
# =============================================
import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

import pytest

from flamingo_proxy.utils.polling import PollTimeout, poll_until


def _sequence(*values):
    it = iter(values)
    return lambda: next(it)


def test_no_sleep_when_first_fetch_is_final():
    sleeps = []
    value, attempts = poll_until(_sequence("completed"), lambda v: v == "queued", 1.5, sleep=sleeps.append)
    assert value == "completed"
    assert attempts == 1
    assert sleeps == []


def test_polls_at_fixed_interval_until_done():
    sleeps = []
    value, attempts = poll_until(
        _sequence("queued", "in_progress", "in_progress", "failed"),
        lambda v: v in ("queued", "in_progress"),
        1.5,
        sleep=sleeps.append,
    )
    assert value == "failed"
    assert attempts == 4
    assert sleeps == [1.5, 1.5, 1.5]


def test_deadline_raises_poll_timeout():
    now = [0.0]

    def fake_sleep(s):
        now[0] += s

    with pytest.raises(PollTimeout) as exc:
        poll_until(lambda: "queued", lambda v: True, 1.0, timeout=3.0, sleep=fake_sleep, clock=lambda: now[0])
    assert exc.value.last == "queued"
    assert exc.value.attempts == 4


def test_fetch_errors_are_not_retried():
    calls = []

    def boom():
        calls.append(1)
        raise ConnectionError("down")

    with pytest.raises(ConnectionError):
        poll_until(boom, lambda v: True, 0, sleep=lambda s: None)
    assert len(calls) == 1
