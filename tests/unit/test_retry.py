from __future__ import annotations

import pytest

from syncwright.exceptions import VerificationTimeoutError
from syncwright.models import RetryResult
from syncwright.retry import repeat_until


@pytest.mark.parametrize("k", [1, 2, 3])
def test_action_runs_exactly_k_times_when_verify_holds_after_k_rounds(clock, k) -> None:
    calls = {"action": 0}

    def action() -> None:
        calls["action"] += 1

    result = repeat_until(action, lambda: calls["action"] >= k, 1.0, 3, clock=clock)

    assert calls["action"] == k
    assert result.success is True
    assert result.attempts == k


def test_action_runs_n_times_and_failure_handler_fires_once(clock) -> None:
    calls = {"action": 0}
    failures: list[RetryResult] = []

    def action() -> None:
        calls["action"] += 1

    result = repeat_until(
        action,
        lambda: False,
        0.5,
        4,
        expected="Contoso",
        observe=lambda: "---",
        on_failure=failures.append,
        clock=clock,
    )

    assert calls["action"] == 4
    assert len(failures) == 1
    assert failures[0] is result
    assert result.success is False
    assert result.expected == "Contoso"
    assert result.last_observed == "---"


def test_default_handler_raises_with_expected_and_observed(clock) -> None:
    with pytest.raises(VerificationTimeoutError) as exc_info:
        repeat_until(
            lambda: None,
            lambda: False,
            0.5,
            2,
            expected="42",
            observe=lambda: "",
            clock=clock,
        )

    err = exc_info.value
    assert err.expected == "42"
    assert err.last_observed == ""
    assert err.attempts == 2
    assert "Expected: '42'" in str(err)


def test_on_failure_none_returns_result(clock) -> None:
    result = repeat_until(lambda: None, lambda: False, 0.25, 1, on_failure=None, clock=clock)

    assert result.success is False
    assert result.attempts == 1


def test_each_round_polls_up_to_timeout(clock) -> None:
    repeat_until(lambda: None, lambda: False, 1.0, 3, poll_interval_s=0.25, on_failure=None, clock=clock)

    assert clock.t == pytest.approx(3.0)


def test_verify_becoming_true_mid_round_stops_polling(clock) -> None:
    result = repeat_until(lambda: None, lambda: clock.t >= 0.5, 2.0, 3, poll_interval_s=0.25, clock=clock)

    assert result.attempts == 1
    assert result.duration_ms == 500


def test_max_attempts_must_be_positive(clock) -> None:
    with pytest.raises(ValueError):
        repeat_until(lambda: None, lambda: True, 1.0, 0, clock=clock)
