"""
Syncwright: polling-based UI synchronization and interactive login for
asynchronously rendering web applications.

- Poll engine: wait_until / poll / wait_for
- Retry-with-verification: repeat_until
- Transaction barrier: wait_for_busy_indicator_clear
- One-time codes: generate_code
- Login state machine: LoginFlow
"""

from .actions import (
    click_if_visible,
    click_when_clickable,
    set_input_value,
    switch_to_top_level,
    wait_for_main_page,
)
from .auth import LoginFlow, LoginState, RedirectContext
from .backends import DomDriver, PlaywrightBackend
from .config import LoginSettings, load_credential
from .exceptions import (
    AuthenticationFailure,
    ConfigurationError,
    ElementNotFoundError,
    SyncwrightError,
    VerificationTimeoutError,
)
from .locators import Condition, Locator, LoginLocators
from .models import Credential, LoginOutcome, RetryResult, RetrySpec, WaitResult, WaitSpec
from .retry import repeat_until
from .totp import generate_code
from .transaction import wait_for_busy_indicator_clear
from .waiting import Clock, poll, think_time, wait_for, wait_until

__version__ = "0.1.0"

__all__ = [
    # Engine
    "Clock",
    "poll",
    "repeat_until",
    "think_time",
    "wait_for",
    "wait_for_busy_indicator_clear",
    "wait_until",
    # Actions
    "click_if_visible",
    "click_when_clickable",
    "set_input_value",
    "switch_to_top_level",
    "wait_for_main_page",
    # Locators
    "Condition",
    "Locator",
    "LoginLocators",
    # Models
    "Credential",
    "LoginOutcome",
    "RetryResult",
    "RetrySpec",
    "WaitResult",
    "WaitSpec",
    # Login
    "LoginFlow",
    "LoginSettings",
    "LoginState",
    "RedirectContext",
    "generate_code",
    "load_credential",
    # Backends
    "DomDriver",
    "PlaywrightBackend",
    # Errors
    "AuthenticationFailure",
    "ConfigurationError",
    "ElementNotFoundError",
    "SyncwrightError",
    "VerificationTimeoutError",
]
