"""
Retry-with-verification.

Setting a value once is unreliable on reactive pages: a placeholder may be
removed or a re-render may overwrite the input right after it was typed. The
engine therefore performs the whole action, polls for the materialized state,
and repeats the action a bounded number of times on mismatch.

``action`` must be safe to run more than once.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .constants import DEFAULT_POLL_INTERVAL_S, DEFAULT_RETRY_ATTEMPTS, DEFAULT_VERIFY_TIMEOUT_S
from .exceptions import VerificationTimeoutError
from .models import RetryResult, RetrySpec
from .waiting import SYSTEM_CLOCK, Clock, wait_for

logger = logging.getLogger(__name__)

FailureHandler = Callable[[RetryResult], None]


def raise_verification_timeout(result: RetryResult) -> None:
    """Default failure handler."""
    raise VerificationTimeoutError(
        expected=result.expected,
        last_observed=result.last_observed,
        attempts=result.attempts,
    )


def repeat_until(
    action: Callable[[], None],
    verify: Callable[[], bool],
    timeout_s: float = DEFAULT_VERIFY_TIMEOUT_S,
    max_attempts: int = DEFAULT_RETRY_ATTEMPTS,
    *,
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    expected: Any = None,
    observe: Callable[[], Any] | None = None,
    on_failure: FailureHandler | None = raise_verification_timeout,
    ignored_exceptions: tuple[type[BaseException], ...] = (),
    clock: Clock | None = None,
) -> RetryResult:
    """
    Run ``action`` then poll ``verify``; repeat up to ``max_attempts`` rounds.

    If ``verify`` holds after round k, ``action`` has run exactly k times.
    If it never holds, ``action`` runs exactly ``max_attempts`` times and
    ``on_failure`` is called exactly once with the final result (the default
    handler raises VerificationTimeoutError). Pass ``on_failure=None`` to get
    the unsuccessful RetryResult back instead.

    Args:
        action: Idempotent operation to perform each round
        verify: Predicate over the materialized state
        timeout_s: Per-round verification budget
        max_attempts: Maximum number of rounds (>= 1)
        expected: Expected value, reported on failure
        observe: Returns the currently observed value, reported on failure
        on_failure: Called once when all rounds are exhausted
    """
    spec = RetrySpec(
        action=action,
        verify=verify,
        timeout_s=timeout_s,
        max_attempts=max_attempts,
        poll_interval_s=poll_interval_s,
        expected=expected,
        observe=observe,
    )
    return run_retry(spec, on_failure=on_failure, ignored_exceptions=ignored_exceptions, clock=clock)


def run_retry(
    spec: RetrySpec,
    *,
    on_failure: FailureHandler | None = raise_verification_timeout,
    ignored_exceptions: tuple[type[BaseException], ...] = (),
    clock: Clock | None = None,
) -> RetryResult:
    clock = clock or SYSTEM_CLOCK
    start = clock.monotonic()
    attempts = 0

    while attempts < spec.max_attempts:
        attempts += 1
        spec.action()
        if wait_for(
            spec.verify,
            spec.timeout_s,
            poll_interval_s=spec.poll_interval_s,
            clock=clock,
            ignored_exceptions=ignored_exceptions,
            label="verify",
        ):
            return RetryResult(
                success=True,
                attempts=attempts,
                duration_ms=int((clock.monotonic() - start) * 1000),
                expected=spec.expected,
                last_observed=spec.observe() if spec.observe is not None else None,
            )
        logger.debug(f"Verification round {attempts}/{spec.max_attempts} did not hold")

    last_observed = spec.observe() if spec.observe is not None else None
    result = RetryResult(
        success=False,
        attempts=attempts,
        duration_ms=int((clock.monotonic() - start) * 1000),
        expected=spec.expected,
        last_observed=last_observed,
    )
    logger.warning(f"Verification exhausted after {attempts} attempt(s)")
    if on_failure is not None:
        on_failure(result)
    return result


__all__ = ["FailureHandler", "raise_verification_timeout", "repeat_until", "run_retry"]
