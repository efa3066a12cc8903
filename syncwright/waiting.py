"""
Bounded polling primitives.

The application under automation gives no "ready" signal, so readiness is
inferred by re-observing the DOM at a fixed cadence until a condition holds
or the time budget runs out. Nothing observed on one tick is reused on the
next: each tick re-resolves the locator through the driver.

Usage:
    from syncwright.locators import Condition, Locator
    from syncwright.waiting import wait_until

    field = Locator.xpath("//input[@name='firstname']")

    # soft: branch on presence
    if wait_until(driver, field, Condition.VISIBLE, timeout_s=2) is None:
        ...

    # hard: absence is fatal, raises ElementNotFoundError
    handle = wait_until(driver, field, Condition.CLICKABLE, timeout_s=10, policy="hard")
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .constants import DEFAULT_POLL_INTERVAL_S, DEFAULT_TIMEOUT_S
from .exceptions import ElementNotFoundError
from .locators import Condition, Locator
from .models import FailurePolicy, WaitResult, WaitSpec

if TYPE_CHECKING:
    from .backends.protocol import DomDriver

logger = logging.getLogger(__name__)


@dataclass
class Clock:
    """Time source for every wait. Swap the functions in tests to avoid real sleeping."""

    monotonic: Callable[[], float] = field(default=time.monotonic)
    sleep: Callable[[float], None] = field(default=time.sleep)
    now: Callable[[], float] = field(default=time.time)


SYSTEM_CLOCK = Clock()


def transient_errors(driver: Any) -> tuple[type[BaseException], ...]:
    """Exceptions a driver may raise while the DOM is being re-rendered."""
    return tuple(getattr(driver, "transient_errors", ()) or ())


def wait_for(
    predicate: Callable[[], bool],
    timeout_s: float = DEFAULT_TIMEOUT_S,
    *,
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    clock: Clock | None = None,
    ignored_exceptions: tuple[type[BaseException], ...] = (),
    label: str = "condition",
) -> bool:
    """
    Re-evaluate ``predicate`` until it returns truthy or ``timeout_s`` elapses.

    The predicate is always evaluated at least once. Sleeps are clipped to the
    remaining budget, so the call never blocks longer than
    ``timeout_s + poll_interval_s``.

    Returns:
        True if the predicate was observed true on some tick, False on timeout.
    """
    clock = clock or SYSTEM_CLOCK
    deadline = clock.monotonic() + timeout_s
    ticks = 0

    while True:
        ticks += 1
        try:
            if predicate():
                return True
        except ignored_exceptions as e:  # pylint: disable=catching-non-exception
            logger.debug(f"{label}: transient error on tick {ticks}: {e}")

        remaining = deadline - clock.monotonic()
        if remaining <= 0:
            return False
        if ticks % 10 == 0:
            logger.debug(f"{label}: still waiting after {ticks} ticks ({remaining:.2f}s left)")
        clock.sleep(min(poll_interval_s, remaining))


def _satisfies(driver: DomDriver, handle: Any, condition: Condition) -> bool:
    if handle is None:
        return False
    if condition is Condition.EXISTS:
        return True
    if not driver.is_visible(handle):
        return False
    if condition is Condition.VISIBLE:
        return True
    return bool(driver.is_enabled(handle))


def poll(
    driver: DomDriver,
    locator: Locator,
    spec: WaitSpec,
    *,
    clock: Clock | None = None,
) -> tuple[Any | None, WaitResult]:
    """
    Poll ``locator`` until ``spec.condition`` holds.

    Returns:
        (handle, result). ``handle`` is the element resolved on the tick that
        satisfied the condition, or None on timeout.
    """
    clock = clock or SYSTEM_CLOCK
    start = clock.monotonic()
    matched: list[Any] = []
    ticks = 0

    def _tick() -> bool:
        nonlocal ticks
        ticks += 1
        handle = driver.find(locator)
        if _satisfies(driver, handle, spec.condition):
            matched.append(handle)
            return True
        return False

    found = wait_for(
        _tick,
        spec.timeout_s,
        poll_interval_s=spec.poll_interval_s,
        clock=clock,
        ignored_exceptions=transient_errors(driver),
        label=f"wait {spec.condition.value} {locator.describe()}",
    )
    result = WaitResult(
        found=found,
        duration_ms=int((clock.monotonic() - start) * 1000),
        timeout=not found,
        ticks=ticks,
        locator=locator.describe(),
    )
    return (matched[-1] if found else None), result


def wait_until(
    driver: DomDriver,
    locator: Locator,
    condition: Condition = Condition.EXISTS,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    *,
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    policy: FailurePolicy = "soft",
    message: str | None = None,
    clock: Clock | None = None,
) -> Any | None:
    """
    Wait for ``locator`` to satisfy ``condition``.

    Args:
        driver: DOM interaction provider
        locator: Element query, re-resolved on every tick
        condition: EXISTS, VISIBLE or CLICKABLE
        timeout_s: Time budget in seconds
        poll_interval_s: Delay between ticks
        policy: "soft" returns None on timeout, "hard" raises
        message: Human-readable explanation used by the hard policy
        clock: Time source (tests)

    Returns:
        The element handle, or None (soft policy only).

    Raises:
        ElementNotFoundError: hard policy and the condition never held.
    """
    spec = WaitSpec(condition=condition, timeout_s=timeout_s, poll_interval_s=poll_interval_s)
    handle, result = poll(driver, locator, spec, clock=clock)
    if result.found:
        return handle
    if policy == "hard":
        raise ElementNotFoundError(
            locator,
            message or f"Element did not become {condition.value}",
            timeout_s=timeout_s,
        )
    logger.debug(f"{locator.describe()} not {condition.value} after {result.duration_ms}ms")
    return None


def think_time(seconds: float, *, clock: Clock | None = None) -> None:
    """Plain timed delay between steps."""
    if seconds > 0:
        (clock or SYSTEM_CLOCK).sleep(seconds)


__all__ = [
    "Clock",
    "SYSTEM_CLOCK",
    "poll",
    "think_time",
    "transient_errors",
    "wait_for",
    "wait_until",
]
