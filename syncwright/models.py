"""
Data models for waits, retries, credentials and login outcomes.

Per-call specs (WaitSpec, RetrySpec) are plain dataclasses because they hold
callables; results and credentials are Pydantic models.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal, Optional

from pydantic import BaseModel, SecretStr

from .constants import DEFAULT_POLL_INTERVAL_S, DEFAULT_RETRY_ATTEMPTS, DEFAULT_VERIFY_TIMEOUT_S
from .exceptions import (
    AuthenticationFailure,
    ConfigurationError,
    ElementNotFoundError,
    SyncwrightError,
    VerificationTimeoutError,
)
from .locators import Condition

FailurePolicy = Literal["soft", "hard"]


@dataclass(frozen=True)
class WaitSpec:
    """How long and how often to re-observe a condition"""

    condition: Condition = Condition.EXISTS
    timeout_s: float = 30.0
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S

    def __post_init__(self) -> None:
        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
        if self.poll_interval_s <= 0:
            raise ValueError("poll_interval_s must be > 0")


@dataclass(frozen=True)
class RetrySpec:
    """Action to repeat until ``verify`` holds, at most ``max_attempts`` rounds"""

    action: Callable[[], None]
    verify: Callable[[], bool]
    timeout_s: float = DEFAULT_VERIFY_TIMEOUT_S
    max_attempts: int = DEFAULT_RETRY_ATTEMPTS
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S
    expected: Any = None
    observe: Optional[Callable[[], Any]] = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")


class WaitResult(BaseModel):
    """Result of a single bounded wait"""

    found: bool
    duration_ms: int
    timeout: bool
    ticks: int
    locator: Optional[str] = None


class RetryResult(BaseModel):
    """Result of retry-with-verification"""

    success: bool
    attempts: int
    duration_ms: int
    expected: Any = None
    last_observed: Any = None


class Credential(BaseModel):
    """
    Login secrets for a single login attempt.

    Values are ``SecretStr`` so they are masked in ``repr``/``str`` and in
    serialized output. Call ``clear()`` once the attempt is over.
    """

    username: SecretStr
    password: SecretStr
    mfa_secret: Optional[SecretStr] = None

    @property
    def has_mfa_secret(self) -> bool:
        if self.mfa_secret is None:
            return False
        return bool(self.mfa_secret.get_secret_value().strip())

    def clear(self) -> None:
        """Drop all secret values held by this credential."""
        self.username = SecretStr("")
        self.password = SecretStr("")
        self.mfa_secret = None


LoginStatus = Literal["success", "redirect", "failure"]

_FAILURE_TYPES: dict[str, type[SyncwrightError]] = {
    "configuration_error": ConfigurationError,
}


class LoginOutcome(BaseModel):
    """Terminal result of the login flow"""

    status: LoginStatus
    reason: Optional[str] = None
    reason_code: Optional[str] = None
    otc_attempts: int = 0

    @classmethod
    def success(cls, *, otc_attempts: int = 0) -> LoginOutcome:
        return cls(status="success", otc_attempts=otc_attempts)

    @classmethod
    def redirect(cls) -> LoginOutcome:
        return cls(status="redirect", reason="Login handed to redirect delegate", reason_code="redirect")

    @classmethod
    def failure(cls, reason: str, reason_code: str = "authentication_failed", *, otc_attempts: int = 0) -> LoginOutcome:
        return cls(status="failure", reason=reason, reason_code=reason_code, otc_attempts=otc_attempts)

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def is_redirect(self) -> bool:
        return self.status == "redirect"

    @property
    def is_failure(self) -> bool:
        return self.status == "failure"

    def raise_for_status(self) -> None:
        """Raise the typed error matching a failure outcome; no-op otherwise."""
        if not self.is_failure:
            return
        reason = self.reason or "Login failed"
        code = self.reason_code or "authentication_failed"
        if code in ("login_page_not_found", "element_not_found"):
            raise ElementNotFoundError(None, reason, reason_code=code)
        if code == "verification_timeout":
            raise VerificationTimeoutError(message=reason)
        error_type = _FAILURE_TYPES.get(code, AuthenticationFailure)
        raise error_type(reason, reason_code=code)


__all__ = [
    "Credential",
    "FailurePolicy",
    "LoginOutcome",
    "LoginStatus",
    "RetryResult",
    "RetrySpec",
    "WaitResult",
    "WaitSpec",
]
