"""
Login configuration.

Settings are plain frozen dataclasses; ``from_env`` reads ``SYNCWRIGHT_*``
environment variables so test runners can configure a login without code:

    SYNCWRIGHT_INTERACTIVE_AUTH_DOMAINS=dynamics.com,crm4.dynamics.com
    SYNCWRIGHT_OTC_RETRY_ATTEMPTS=3
    SYNCWRIGHT_USERNAME=...
    SYNCWRIGHT_PASSWORD=...
    SYNCWRIGHT_MFA_SECRET_KEY=...
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlparse

from pydantic import SecretStr

from .constants import (
    DEFAULT_MAIN_PAGE_TIMEOUT_S,
    DEFAULT_POLL_INTERVAL_S,
    DEFAULT_PROBE_TIMEOUT_S,
    DEFAULT_REDIRECT_WAIT_S,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_THINK_TIME_S,
    DEFAULT_TIMEOUT_S,
    ENV_PREFIX,
)
from .models import Credential


@dataclass(frozen=True)
class LoginSettings:
    """
    Knobs for the login flow.

    ``interactive_auth_domains`` lists host suffixes that need the interactive
    sign-in. ``None`` means every host does; hosts outside a given list are
    assumed to be pre-authenticated.
    """

    interactive_auth_domains: tuple[str, ...] | None = None
    otc_retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    username_timeout_s: float = 30.0
    probe_timeout_s: float = DEFAULT_PROBE_TIMEOUT_S
    main_page_timeout_s: float = DEFAULT_MAIN_PAGE_TIMEOUT_S
    busy_timeout_s: float = DEFAULT_TIMEOUT_S
    page_load_timeout_s: float = DEFAULT_TIMEOUT_S
    otc_verify_timeout_s: float = 1.0
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S
    think_time_s: float = DEFAULT_THINK_TIME_S
    redirect_wait_s: float = DEFAULT_REDIRECT_WAIT_S

    def __post_init__(self) -> None:
        if self.otc_retry_attempts < 1:
            raise ValueError("otc_retry_attempts must be >= 1")
        for name in (
            "username_timeout_s",
            "probe_timeout_s",
            "main_page_timeout_s",
            "busy_timeout_s",
            "page_load_timeout_s",
            "otc_verify_timeout_s",
            "poll_interval_s",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0")
        if self.think_time_s < 0 or self.redirect_wait_s < 0:
            raise ValueError("think_time_s and redirect_wait_s must be >= 0")
        if self.interactive_auth_domains is not None:
            normalized = tuple(d.strip().lower().lstrip(".") for d in self.interactive_auth_domains if d.strip())
            object.__setattr__(self, "interactive_auth_domains", normalized)

    def requires_interactive_auth(self, uri: str) -> bool:
        """True when the host of ``uri`` is covered by the interactive-auth allow-list."""
        if self.interactive_auth_domains is None:
            return True
        host = (urlparse(uri).hostname or "").lower()
        return any(host.endswith(d) for d in self.interactive_auth_domains)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LoginSettings:
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        domains = _get(env, "INTERACTIVE_AUTH_DOMAINS")
        if domains is not None:
            kwargs["interactive_auth_domains"] = tuple(d for d in domains.split(",") if d.strip())

        attempts = _get(env, "OTC_RETRY_ATTEMPTS")
        if attempts is not None:
            kwargs["otc_retry_attempts"] = int(attempts)

        for field_name, key in (
            ("username_timeout_s", "USERNAME_TIMEOUT_S"),
            ("probe_timeout_s", "PROBE_TIMEOUT_S"),
            ("main_page_timeout_s", "MAIN_PAGE_TIMEOUT_S"),
            ("busy_timeout_s", "BUSY_TIMEOUT_S"),
            ("page_load_timeout_s", "PAGE_LOAD_TIMEOUT_S"),
            ("otc_verify_timeout_s", "OTC_VERIFY_TIMEOUT_S"),
            ("poll_interval_s", "POLL_INTERVAL_S"),
            ("think_time_s", "THINK_TIME_S"),
            ("redirect_wait_s", "REDIRECT_WAIT_S"),
        ):
            raw = _get(env, key)
            if raw is not None:
                kwargs[field_name] = float(raw)

        return cls(**kwargs)  # type: ignore[arg-type]


def _get(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(f"{ENV_PREFIX}{key}")
    if value is None or not str(value).strip():
        return None
    return str(value).strip()


def load_credential(environ: Mapping[str, str] | None = None) -> Credential | None:
    """
    Build a Credential from the environment.

    Returns None when no username is configured (pass-through login).
    """
    env = os.environ if environ is None else environ
    username = _get(env, "USERNAME")
    if username is None:
        return None
    mfa_secret = _get(env, "MFA_SECRET_KEY")
    return Credential(
        username=SecretStr(username),
        password=SecretStr(env.get(f"{ENV_PREFIX}PASSWORD", "")),
        mfa_secret=SecretStr(mfa_secret) if mfa_secret is not None else None,
    )


__all__ = ["LoginSettings", "load_credential"]
