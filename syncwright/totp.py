"""
One-time codes (RFC 6238 TOTP, 30-second step, 6 digits).

Codes are a pure function of (secret, time) and must be generated fresh for
every submission: a stale code is indistinguishable from a wrong one to the
server.
"""

from __future__ import annotations

import binascii
import time

import pyotp

from .exceptions import ConfigurationError

TOTP_INTERVAL_S = 30
TOTP_DIGITS = 6


def normalize_secret(secret: str) -> str:
    """Strip whitespace and dashes, upper-case, and restore base32 padding."""
    cleaned = "".join(ch for ch in secret if not ch.isspace() and ch != "-").upper().rstrip("=")
    if not cleaned:
        raise ConfigurationError("MFA secret is empty")
    padding = (-len(cleaned)) % 8
    return cleaned + "=" * padding


def generate_code(secret: str, for_time: float | None = None) -> str:
    """
    Compute the TOTP code for ``secret`` at ``for_time`` (epoch seconds, default now).

    Raises:
        ConfigurationError: The secret is not valid base32.
    """
    totp = pyotp.TOTP(normalize_secret(secret), digits=TOTP_DIGITS, interval=TOTP_INTERVAL_S)
    when = time.time() if for_time is None else for_time
    try:
        return totp.at(int(when))
    except (binascii.Error, ValueError) as e:
        raise ConfigurationError("MFA secret is not a valid base32 string") from e


def time_step(for_time: float) -> int:
    return int(for_time // TOTP_INTERVAL_S)


def seconds_remaining(for_time: float | None = None) -> float:
    """Seconds left before the code for ``for_time`` expires."""
    when = time.time() if for_time is None else for_time
    return TOTP_INTERVAL_S - (when % TOTP_INTERVAL_S)


__all__ = [
    "TOTP_DIGITS",
    "TOTP_INTERVAL_S",
    "generate_code",
    "normalize_secret",
    "seconds_remaining",
    "time_step",
]
