"""Tests for RetryPolicy backoff."""

import pytest

from orchestrator.events.backoff import RetryPolicy


def test_delay_grows_exponentially_until_cap() -> None:
    policy = RetryPolicy(base_delay=5.0, max_delay=30.0, multiplier=2.0)
    assert [policy.delay(n) for n in range(1, 6)] == [5.0, 10.0, 20.0, 30.0, 30.0]


def test_delay_is_non_decreasing() -> None:
    policy = RetryPolicy(base_delay=1.0, max_delay=100.0, multiplier=3.0)
    delays = [policy.delay(n) for n in range(1, 10)]
    assert delays == sorted(delays)


def test_next_schedule_from_past_schedule_uses_now() -> None:
    policy = RetryPolicy(base_delay=5.0)
    assert policy.next_schedule(prior=100.0, retry=1, now=200.0) == 205.0


def test_next_schedule_from_future_schedule_keeps_monotonic() -> None:
    policy = RetryPolicy(base_delay=5.0)
    assert policy.next_schedule(prior=300.0, retry=1, now=200.0) == 305.0


def test_jitter_only_adds_time() -> None:
    policy = RetryPolicy(base_delay=10.0, max_delay=10.0, jitter=0.5)
    for _ in range(50):
        assert 10.0 <= policy.delay(3) <= 15.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"base_delay": 0},
        {"multiplier": 0.5},
        {"base_delay": 10.0, "max_delay": 5.0},
        {"jitter": -0.1},
    ],
)
def test_invalid_policy_rejected(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)


def test_from_settings_reads_backoff_section() -> None:
    policy = RetryPolicy.from_settings({"base_delay": 2, "max_delay": 8, "multiplier": 4})
    assert policy == RetryPolicy(base_delay=2.0, max_delay=8.0, multiplier=4.0, jitter=0.0)
