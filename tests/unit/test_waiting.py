from __future__ import annotations

import pytest

from syncwright.exceptions import ElementNotFoundError
from syncwright.locators import Condition, Locator
from syncwright.models import WaitSpec
from syncwright.waiting import poll, think_time, wait_for, wait_until

FIELD = Locator.xpath("//input[@name='firstname']", description="first name")


def test_returns_handle_without_sleeping_when_already_present(driver, clock) -> None:
    element = driver.add(FIELD)

    handle = wait_until(driver, FIELD, Condition.EXISTS, timeout_s=5, clock=clock)

    assert handle is element
    assert clock.sleeps == []


def test_waits_for_element_rendered_later(driver, clock) -> None:
    driver.at(1.0, lambda: driver.add(FIELD))

    handle, result = poll(driver, FIELD, WaitSpec(timeout_s=5, poll_interval_s=0.25), clock=clock)

    assert handle is not None
    assert result.found is True
    assert result.timeout is False
    assert result.ticks == 5
    assert result.duration_ms == 1000


def test_soft_policy_returns_none_on_timeout(driver, clock) -> None:
    handle = wait_until(driver, FIELD, Condition.VISIBLE, timeout_s=2, poll_interval_s=0.25, clock=clock)

    assert handle is None
    assert clock.t == pytest.approx(2.0)


def test_hard_policy_raises_with_locator_and_explanation(driver, clock) -> None:
    with pytest.raises(ElementNotFoundError) as exc_info:
        wait_until(
            driver,
            FIELD,
            Condition.CLICKABLE,
            timeout_s=1,
            policy="hard",
            message="First name field missing",
            clock=clock,
        )

    err = exc_info.value
    assert err.locator == FIELD
    assert err.timeout_s == 1
    assert "First name field missing" in str(err)
    assert "first name" in str(err)
    assert err.reason_code == "element_not_found"


def test_visible_condition_ignores_hidden_element(driver, clock) -> None:
    element = driver.add(FIELD, visible=False)
    driver.at(0.5, lambda: setattr(element, "visible", True))

    handle, result = poll(driver, FIELD, WaitSpec(Condition.VISIBLE, timeout_s=1, poll_interval_s=0.25), clock=clock)
    assert handle is element
    assert result.duration_ms == 500


def test_clickable_requires_enabled(driver, clock) -> None:
    driver.add(FIELD, enabled=False)

    assert wait_until(driver, FIELD, Condition.VISIBLE, timeout_s=1, clock=clock) is not None
    assert wait_until(driver, FIELD, Condition.CLICKABLE, timeout_s=1, clock=clock) is None


def test_locator_is_re_resolved_every_tick(driver, clock) -> None:
    first = driver.add(FIELD, visible=False)

    def _rerender() -> None:
        driver.remove(FIELD)
        driver.add(FIELD, visible=True)

    driver.at(0.5, _rerender)

    handle, result = poll(driver, FIELD, WaitSpec(Condition.VISIBLE, timeout_s=2, poll_interval_s=0.25), clock=clock)

    assert handle is not first
    assert handle.visible is True
    assert len(driver.calls_of("find")) == result.ticks


def test_transient_driver_errors_count_as_not_yet(driver, clock) -> None:
    driver.transient_errors = (KeyError,)
    original_find = driver.find
    failures = {"left": 2}

    def flaky_find(locator):
        if failures["left"]:
            failures["left"] -= 1
            raise KeyError("node detached")
        return original_find(locator)

    driver.find = flaky_find
    driver.add(FIELD)

    handle = wait_until(driver, FIELD, timeout_s=2, poll_interval_s=0.25, clock=clock)

    assert handle is not None
    assert clock.sleeps == [0.25, 0.25]


def test_unexpected_errors_propagate(driver, clock) -> None:
    def broken_find(locator):
        raise AttributeError("bug")

    driver.find = broken_find

    with pytest.raises(AttributeError):
        wait_until(driver, FIELD, timeout_s=1, clock=clock)


@pytest.mark.parametrize(
    "timeout_s,interval_s",
    [(0.1, 0.25), (0.3, 0.25), (1.0, 0.25), (2.6, 0.5), (5.0, 1.5)],
)
def test_never_blocks_longer_than_timeout_plus_interval(clock, timeout_s, interval_s) -> None:
    assert wait_for(lambda: False, timeout_s, poll_interval_s=interval_s, clock=clock) is False
    assert clock.t <= timeout_s + interval_s
    assert clock.t >= timeout_s


def test_wait_for_true_only_when_observed(clock) -> None:
    observations = []

    def predicate() -> bool:
        observations.append(clock.t)
        return clock.t >= 0.75

    assert wait_for(predicate, 2.0, poll_interval_s=0.25, clock=clock) is True
    assert observations[-1] == pytest.approx(0.75)


@pytest.mark.parametrize("timeout_s,interval_s", [(0, 0.25), (-1, 0.25), (1, 0)])
def test_wait_spec_rejects_non_positive_values(timeout_s, interval_s) -> None:
    with pytest.raises(ValueError):
        WaitSpec(timeout_s=timeout_s, poll_interval_s=interval_s)


def test_think_time_sleeps_once(clock) -> None:
    think_time(1.5, clock=clock)
    think_time(0, clock=clock)
    assert clock.sleeps == [1.5]
