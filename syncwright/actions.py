"""
Interaction helpers composed from the poll, retry and barrier primitives.

Every state-mutating helper follows the same shape:
poll the locator until clickable -> act -> verify (and retry) -> transaction barrier.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .constants import (
    DEFAULT_POLL_INTERVAL_S,
    DEFAULT_PROBE_TIMEOUT_S,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_TIMEOUT_S,
    DEFAULT_VERIFY_TIMEOUT_S,
    EMPTY_VALUE_PLACEHOLDER,
)
from .exceptions import VerificationTimeoutError
from .locators import Condition, Locator, LoginLocators
from .models import FailurePolicy, RetryResult
from .retry import repeat_until
from .transaction import wait_for_busy_indicator_clear
from .waiting import Clock, transient_errors, wait_until

if TYPE_CHECKING:
    from .backends.protocol import DomDriver

logger = logging.getLogger(__name__)

_REDACTED = "***"


def values_match(observed: str | None, expected: str) -> bool:
    """Compare an input's materialized value, treating the empty placeholder as empty."""
    actual = (observed or "").strip()
    if actual == EMPTY_VALUE_PLACEHOLDER:
        actual = ""
    return actual == (expected or "").strip()


def read_value(driver: DomDriver, locator: Locator) -> str | None:
    handle = driver.find(locator)
    if handle is None:
        return None
    return driver.get_value(handle)


def set_input_value(
    driver: DomDriver,
    locator: Locator,
    value: str,
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    verify_timeout_s: float = DEFAULT_VERIFY_TIMEOUT_S,
    max_attempts: int = DEFAULT_RETRY_ATTEMPTS,
    busy_timeout_s: float = DEFAULT_TIMEOUT_S,
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    sensitive: bool = False,
    clock: Clock | None = None,
) -> RetryResult:
    """
    Type ``value`` into an input and keep retyping until it sticks.

    Args:
        driver: DOM interaction provider
        locator: Input element query
        value: Text to enter
        timeout_s: Budget for the input to become clickable (hard failure)
        verify_timeout_s: Per-round budget for the value to materialize
        max_attempts: Rounds before giving up
        sensitive: Mask expected/observed values in errors

    Raises:
        ElementNotFoundError: The input never became clickable.
        VerificationTimeoutError: The value never materialized.
    """
    wait_until(
        driver,
        locator,
        Condition.CLICKABLE,
        timeout_s,
        poll_interval_s=poll_interval_s,
        policy="hard",
        message="Input is not clickable",
        clock=clock,
    )

    def _type() -> None:
        # Re-resolve each round; the previous node may have been replaced.
        handle = wait_until(
            driver,
            locator,
            Condition.CLICKABLE,
            timeout_s,
            poll_interval_s=poll_interval_s,
            policy="hard",
            message="Input is not clickable",
            clock=clock,
        )
        driver.clear(handle)
        driver.click(handle)
        driver.type_text(handle, value)
        wait_for_busy_indicator_clear(driver, busy_timeout_s, poll_interval_s=poll_interval_s, clock=clock)

    def _on_failure(result: RetryResult) -> None:
        expected: Any = _REDACTED if sensitive else result.expected
        observed: Any = _REDACTED if sensitive else result.last_observed
        raise VerificationTimeoutError(
            expected=expected,
            last_observed=observed,
            attempts=result.attempts,
            message=(
                f"Value of {locator.describe()} did not stick after {result.attempts} attempt(s). "
                f"Expected: {expected!r}. Actual: {observed!r}"
            ),
        )

    result = repeat_until(
        _type,
        lambda: values_match(read_value(driver, locator), value),
        verify_timeout_s,
        max_attempts,
        poll_interval_s=poll_interval_s,
        expected=_REDACTED if sensitive else value,
        observe=(lambda: _REDACTED) if sensitive else (lambda: read_value(driver, locator)),
        on_failure=_on_failure,
        ignored_exceptions=transient_errors(driver),
        clock=clock,
    )
    wait_for_busy_indicator_clear(driver, busy_timeout_s, poll_interval_s=poll_interval_s, clock=clock)
    return result


def submit_input(
    driver: DomDriver,
    locator: Locator,
    *,
    timeout_s: float = DEFAULT_PROBE_TIMEOUT_S,
    busy_timeout_s: float = DEFAULT_TIMEOUT_S,
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    clock: Clock | None = None,
) -> None:
    """Press Enter on a freshly resolved input, then wait for the page to settle."""
    handle = wait_until(
        driver,
        locator,
        Condition.EXISTS,
        timeout_s,
        poll_interval_s=poll_interval_s,
        policy="hard",
        message="Input to submit disappeared",
        clock=clock,
    )
    driver.press(handle, "Enter")
    wait_for_busy_indicator_clear(driver, busy_timeout_s, poll_interval_s=poll_interval_s, clock=clock)


def click_if_visible(
    driver: DomDriver,
    locator: Locator,
    timeout_s: float = DEFAULT_PROBE_TIMEOUT_S,
    *,
    busy_timeout_s: float = DEFAULT_TIMEOUT_S,
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    clock: Clock | None = None,
) -> bool:
    """Click ``locator`` if it becomes visible within ``timeout_s``. Returns whether it clicked."""
    handle = wait_until(
        driver, locator, Condition.VISIBLE, timeout_s, poll_interval_s=poll_interval_s, clock=clock
    )
    if handle is None:
        return False
    driver.click(handle)
    wait_for_busy_indicator_clear(driver, busy_timeout_s, poll_interval_s=poll_interval_s, clock=clock)
    return True


def click_when_clickable(
    driver: DomDriver,
    locator: Locator,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    *,
    busy_timeout_s: float = DEFAULT_TIMEOUT_S,
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    message: str | None = None,
    clock: Clock | None = None,
) -> None:
    handle = wait_until(
        driver,
        locator,
        Condition.CLICKABLE,
        timeout_s,
        poll_interval_s=poll_interval_s,
        policy="hard",
        message=message or "Element is not clickable",
        clock=clock,
    )
    driver.click(handle)
    wait_for_busy_indicator_clear(driver, busy_timeout_s, poll_interval_s=poll_interval_s, clock=clock)


def wait_for_main_page(
    driver: DomDriver,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    *,
    locators: LoginLocators | None = None,
    policy: FailurePolicy = "soft",
    message: str | None = None,
    busy_timeout_s: float = DEFAULT_TIMEOUT_S,
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    clock: Clock | None = None,
) -> bool:
    """
    Wait for the application's main content.

    On the unified interface the busy indicator is also allowed to clear before
    returning, since the shell renders before its data.
    """
    locators = locators or LoginLocators()
    handle = wait_until(
        driver,
        locators.main_page,
        Condition.EXISTS,
        timeout_s,
        poll_interval_s=poll_interval_s,
        policy=policy,
        message=message or "Main page did not load",
        clock=clock,
    )
    if handle is None:
        return False
    if driver.exists(locators.uci_main_page):
        wait_for_busy_indicator_clear(
            driver,
            busy_timeout_s,
            indicator=locators.busy_indicator,
            poll_interval_s=poll_interval_s,
            clock=clock,
        )
    return True


def switch_to_top_level(driver: DomDriver, *, page_load_timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
    """Let the main frame finish loading, then return to the top-level document."""
    driver.wait_for_page_load(page_load_timeout_s)
    try:
        driver.switch_frame(0)
        driver.wait_for_page_load(page_load_timeout_s)
    except LookupError:
        logger.debug("No child frame to enter; staying on the top-level document")
    driver.switch_frame(None)


__all__ = [
    "click_if_visible",
    "click_when_clickable",
    "read_value",
    "set_input_value",
    "submit_input",
    "switch_to_top_level",
    "values_match",
    "wait_for_main_page",
]
