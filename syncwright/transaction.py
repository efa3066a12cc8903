"""
Transaction barrier: wait for the application's busy indicator to clear.

Called after every state-mutating action so the next poll does not observe a
half-rendered DOM. A driver may expose ``is_busy()`` to read the
application's own signal; otherwise the busy indicator locator is checked.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .constants import DEFAULT_POLL_INTERVAL_S, DEFAULT_TIMEOUT_S
from .locators import DEFAULT_BUSY_INDICATOR, Locator
from .waiting import Clock, transient_errors, wait_for

if TYPE_CHECKING:
    from .backends.protocol import DomDriver

logger = logging.getLogger(__name__)


def _busy(driver: DomDriver, indicator: Locator) -> bool:
    is_busy = getattr(driver, "is_busy", None)
    if callable(is_busy):
        return bool(is_busy())
    return bool(driver.exists(indicator))


def wait_for_busy_indicator_clear(
    driver: DomDriver,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    *,
    indicator: Locator = DEFAULT_BUSY_INDICATOR,
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    clock: Clock | None = None,
) -> bool:
    """
    Block until the busy indicator is gone.

    Returns:
        True when the page is idle (immediately if the indicator was never
        present), False if it was still busy at timeout.
    """
    errors = transient_errors(driver)
    try:
        if not _busy(driver, indicator):
            return True
    except errors as e:  # pylint: disable=catching-non-exception
        logger.debug(f"Busy check failed, polling: {e}")

    cleared = wait_for(
        lambda: not _busy(driver, indicator),
        timeout_s,
        poll_interval_s=poll_interval_s,
        clock=clock,
        ignored_exceptions=errors,
        label="busy indicator",
    )
    if not cleared:
        logger.warning(f"Busy indicator still present after {timeout_s:g}s")
    return cleared


__all__ = ["wait_for_busy_indicator_clear"]
