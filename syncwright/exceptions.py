"""
Typed failures raised by the synchronization primitives and the login flow.

Every error carries a ``reason_code`` so callers (and ``LoginOutcome``) can
branch on the category without parsing messages. Messages never contain
credential material.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .locators import Locator


class SyncwrightError(RuntimeError):
    """Base class for all syncwright errors."""

    reason_code = "error"

    def __init__(self, message: str, *, reason_code: str | None = None) -> None:
        super().__init__(message)
        if reason_code is not None:
            self.reason_code = reason_code


class ConfigurationError(SyncwrightError):
    """Required configuration or secret is missing or malformed. Never retried."""

    reason_code = "configuration_error"


class ElementNotFoundError(SyncwrightError):
    """A locator did not satisfy its condition within the timeout (hard policy)."""

    reason_code = "element_not_found"

    def __init__(
        self,
        locator: Locator | None,
        explanation: str,
        *,
        timeout_s: float | None = None,
        reason_code: str | None = None,
    ) -> None:
        message = explanation
        if locator is not None:
            message = f"{explanation} [{locator.describe()}]"
        if timeout_s is not None:
            message = f"{message} after {timeout_s:g}s"
        super().__init__(message, reason_code=reason_code)
        self.locator = locator
        self.explanation = explanation
        self.timeout_s = timeout_s


class VerificationTimeoutError(SyncwrightError):
    """Retry-with-verification exhausted its attempts."""

    reason_code = "verification_timeout"

    def __init__(
        self,
        *,
        expected: Any = None,
        last_observed: Any = None,
        attempts: int = 0,
        message: str | None = None,
    ) -> None:
        super().__init__(
            message
            or f"Verification failed after {attempts} attempt(s). "
            f"Expected: {expected!r}. Actual: {last_observed!r}"
        )
        self.expected = expected
        self.last_observed = last_observed
        self.attempts = attempts


class AuthenticationFailure(SyncwrightError):
    """The login protocol finished with an explicit negative outcome."""

    reason_code = "authentication_failed"


__all__ = [
    "AuthenticationFailure",
    "ConfigurationError",
    "ElementNotFoundError",
    "SyncwrightError",
    "VerificationTimeoutError",
]
