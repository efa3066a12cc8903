"""
Interactive login flow.

Drives a multi-step identity-provider sign-in on top of the poll/retry engine:

    START -> USERNAME_ENTRY -> {ALREADY_AUTHENTICATED | OTC_CHALLENGE | PASSWORD_ENTRY}
          -> {REDIRECT | OTC_CHALLENGE} -> OTC_ENTRY (loop)
          -> {STAY_SIGNED_IN | ALREADY_AUTHENTICATED} -> SUCCESS | FAILURE

The page never says "done", so each branch is decided by short, bounded
re-observation. Expected branches ("already logged in", "no password step for
this tenant") are ordinary transitions; only unrecoverable conditions become
a failure outcome.

Example:
    from pydantic import SecretStr
    from syncwright import Credential, LoginFlow, LoginSettings

    flow = LoginFlow(driver, settings=LoginSettings(interactive_auth_domains=("dynamics.com",)))
    outcome = flow.login(
        "https://org.crm.dynamics.com/",
        Credential(username=SecretStr("user@org"), password=SecretStr("..."), mfa_secret=SecretStr("...")),
    )
    outcome.raise_for_status()
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs, urlsplit, urlunsplit

from pydantic import SecretStr

from .actions import (
    click_if_visible,
    click_when_clickable,
    set_input_value,
    submit_input,
    switch_to_top_level,
    wait_for_main_page,
)
from .config import LoginSettings, load_credential
from .exceptions import ConfigurationError, SyncwrightError
from .locators import Condition, LoginLocators
from .models import Credential, LoginOutcome
from .totp import generate_code
from .transaction import wait_for_busy_indicator_clear
from .waiting import SYSTEM_CLOCK, Clock, think_time, transient_errors, wait_until

if TYPE_CHECKING:
    from .backends.protocol import DomDriver

logger = logging.getLogger(__name__)

TEST_MODE_PARAMS = (("flags", "easyreproautomation=true"), ("perf", "true"))


class LoginState(Enum):
    START = "start"
    USERNAME_ENTRY = "username_entry"
    ALREADY_AUTHENTICATED = "already_authenticated"
    OTC_CHALLENGE = "otc_challenge"
    PASSWORD_ENTRY = "password_entry"
    REDIRECT = "redirect"
    OTC_ENTRY = "otc_entry"
    STAY_SIGNED_IN = "stay_signed_in"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class RedirectContext:
    """
    Handed to a redirect delegate when sign-in is delegated to another IdP.

    Only valid for the duration of the delegate call: the credential is cleared
    when ``login`` returns, so the delegate must not keep the context or its
    secret values.
    """

    username: SecretStr
    password: SecretStr
    driver: Any = field(repr=False)


RedirectAction = Callable[[RedirectContext], None]


class LoginFlow:
    """
    Stateful orchestration of one login at a time.

    Attributes:
        driver: DOM interaction provider
        settings: Timeouts, OTC attempts and the interactive-auth allow-list
        locators: Element queries for the sign-in pages
        state: Current LoginState
        history: States visited during the last ``login`` call
    """

    def __init__(
        self,
        driver: DomDriver,
        *,
        settings: LoginSettings | None = None,
        locators: LoginLocators | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.driver = driver
        self.settings = settings or LoginSettings()
        self.locators = locators or LoginLocators()
        self.clock = clock or SYSTEM_CLOCK
        self.state = LoginState.START
        self.history: list[LoginState] = []

    # ------------------------------------------------------------------ login

    def login(
        self,
        uri: str,
        credential: Credential,
        *,
        redirect_action: RedirectAction | None = None,
    ) -> LoginOutcome:
        """
        Sign in at ``uri``.

        The credential is cleared before returning, whatever the outcome.

        Returns:
            LoginOutcome with status success, redirect or failure.
        """
        self.history = []
        self._transition(LoginState.START)
        try:
            outcome = self._run(uri, credential, redirect_action)
        except ConfigurationError as e:
            logger.error(f"Login configuration error: {e}")
            outcome = LoginOutcome.failure(str(e), e.reason_code)
        except SyncwrightError as e:
            logger.warning(f"Login failed: {e}")
            outcome = LoginOutcome.failure(str(e), e.reason_code)
        except transient_errors(self.driver) as e:  # pylint: disable=catching-non-exception
            # Driver messages can echo typed text; report the error type only.
            reason = f"Browser driver error during {self.state.value}: {type(e).__name__}"
            logger.warning(f"Login failed: {reason}")
            outcome = LoginOutcome.failure(reason, "driver_error")
        finally:
            credential.clear()

        if outcome.is_failure:
            self._transition(LoginState.FAILURE)
        return outcome

    def _run(
        self,
        uri: str,
        credential: Credential,
        redirect_action: RedirectAction | None,
    ) -> LoginOutcome:
        self.driver.navigate(uri)
        if not self.settings.requires_interactive_auth(uri):
            logger.info("Host does not require interactive sign-in; assuming authenticated session")
            self._transition(LoginState.SUCCESS)
            return LoginOutcome.success()

        click_if_visible(self.driver, self.locators.use_another_account, **self._probe_kwargs())

        self._transition(LoginState.USERNAME_ENTRY)
        waiting_for_otc = False
        if not self._enter_username(credential):
            if self._is_already_authenticated():
                return self._succeed()
            think_time(self.settings.think_time_s, clock=self.clock)
            if not self._otc_prompt_present():
                return LoginOutcome.failure(
                    "Login page failed: username input not found",
                    "login_page_not_found",
                )
            waiting_for_otc = True
        else:
            think_time(self.settings.think_time_s, clock=self.clock)
            # Some tenants ask for the code right after the username.
            waiting_for_otc = self._otc_prompt_present()

        if waiting_for_otc:
            self._transition(LoginState.OTC_CHALLENGE)
        else:
            self._transition(LoginState.PASSWORD_ENTRY)
            click_if_visible(self.driver, self.locators.work_account_tile, **self._probe_kwargs())
            think_time(self.settings.think_time_s, clock=self.clock)

            if redirect_action is not None:
                think_time(self.settings.redirect_wait_s, clock=self.clock)
                redirect_action(
                    RedirectContext(
                        username=credential.username,
                        password=credential.password,
                        driver=self.driver,
                    )
                )
                self._transition(LoginState.REDIRECT)
                return LoginOutcome.redirect()

            self._enter_password(credential)
            think_time(self.settings.think_time_s, clock=self.clock)
            self._transition(LoginState.OTC_CHALLENGE)

        return self._one_time_code_loop(credential)

    def _one_time_code_loop(self, credential: Credential) -> LoginOutcome:
        max_attempts = self.settings.otc_retry_attempts
        attempts = 0
        entered_any = False
        success = False

        while not success and attempts < max_attempts:
            attempts += 1
            self._transition(LoginState.OTC_ENTRY)
            entered_any = self._enter_one_time_code(credential) or entered_any
            success = self._click_stay_signed_in() or self._is_already_authenticated()
            if not success:
                logger.warning(f"Sign-in not confirmed after one-time code attempt {attempts}/{max_attempts}")

        if success:
            return self._succeed(otc_attempts=attempts)
        if entered_any:
            return LoginOutcome.failure(
                f"One-time code was not accepted after {attempts} attempt(s). "
                "Please check the MFA secret key in configuration.",
                "otc_not_accepted",
                otc_attempts=attempts,
            )
        return LoginOutcome.failure(
            "Sign-in was not confirmed: no stay-signed-in prompt and main page not loaded",
            "login_not_confirmed",
            otc_attempts=attempts,
        )

    # ------------------------------------------------------------------ steps

    def _enter_username(self, credential: Credential) -> bool:
        handle = wait_until(
            self.driver,
            self.locators.username,
            Condition.CLICKABLE,
            self.settings.username_timeout_s,
            poll_interval_s=self.settings.poll_interval_s,
            clock=self.clock,
        )
        if handle is None:
            return False
        self.driver.type_text(handle, credential.username.get_secret_value())
        self.driver.press(handle, "Enter")
        self._barrier()
        return True

    def _enter_password(self, credential: Credential) -> None:
        handle = wait_until(
            self.driver,
            self.locators.password,
            Condition.CLICKABLE,
            self.settings.probe_timeout_s,
            poll_interval_s=self.settings.poll_interval_s,
            policy="hard",
            message="Password input not found",
            clock=self.clock,
        )
        self.driver.type_text(handle, credential.password.get_secret_value())
        self.driver.press(handle, "Enter")
        self._barrier()

    def _enter_one_time_code(self, credential: Credential) -> bool:
        """Returns False when no code was asked for, True when a code was submitted."""
        if not self._otc_prompt_present():
            return False
        secret = credential.mfa_secret
        if secret is None or not credential.has_mfa_secret:
            raise ConfigurationError(
                "The application is waiting for a one-time code but no MFA secret key is configured"
            )
        # Fresh every attempt: the previous code's window may have closed.
        code = generate_code(secret.get_secret_value(), self.clock.now())
        set_input_value(
            self.driver,
            self.locators.one_time_code,
            code,
            timeout_s=self.settings.probe_timeout_s,
            verify_timeout_s=self.settings.otc_verify_timeout_s,
            busy_timeout_s=self.settings.busy_timeout_s,
            poll_interval_s=self.settings.poll_interval_s,
            sensitive=True,
            clock=self.clock,
        )
        submit_input(
            self.driver,
            self.locators.one_time_code,
            timeout_s=self.settings.probe_timeout_s,
            busy_timeout_s=self.settings.busy_timeout_s,
            poll_interval_s=self.settings.poll_interval_s,
            clock=self.clock,
        )
        return True

    def _otc_prompt_present(self) -> bool:
        handle = wait_until(
            self.driver,
            self.locators.one_time_code,
            Condition.VISIBLE,
            self.settings.probe_timeout_s,
            poll_interval_s=self.settings.poll_interval_s,
            clock=self.clock,
        )
        return handle is not None

    def _click_stay_signed_in(self) -> bool:
        clicked = click_if_visible(self.driver, self.locators.stay_signed_in, **self._probe_kwargs())
        if clicked:
            self._transition(LoginState.STAY_SIGNED_IN)
        return clicked

    def _is_already_authenticated(self) -> bool:
        found = wait_for_main_page(
            self.driver,
            self.settings.probe_timeout_s,
            locators=self.locators,
            busy_timeout_s=self.settings.busy_timeout_s,
            poll_interval_s=self.settings.poll_interval_s,
            clock=self.clock,
        )
        if found and self.state is not LoginState.STAY_SIGNED_IN:
            self._transition(LoginState.ALREADY_AUTHENTICATED)
        return found

    def _succeed(self, *, otc_attempts: int = 0) -> LoginOutcome:
        switch_to_top_level(self.driver, page_load_timeout_s=self.settings.page_load_timeout_s)
        self._transition(LoginState.SUCCESS)
        return LoginOutcome.success(otc_attempts=otc_attempts)

    # ---------------------------------------------------------- other entries

    def login_from_settings(
        self,
        uri: str,
        environ: dict[str, str] | None = None,
        *,
        redirect_action: RedirectAction | None = None,
    ) -> LoginOutcome:
        """Log in with credentials from the environment, or pass through when none are set."""
        credential = load_credential(environ)
        if credential is None:
            return self.pass_through_login(uri)
        return self.login(uri, credential, redirect_action=redirect_action)

    def pass_through_login(self, uri: str) -> LoginOutcome:
        """
        Navigate to an environment that is already authenticated (e.g. SSO via
        the OS session) and wait for the main page.

        Raises:
            ElementNotFoundError: The main page did not load in time.
        """
        self.driver.navigate(uri)
        wait_for_main_page(
            self.driver,
            self.settings.main_page_timeout_s,
            locators=self.locators,
            policy="hard",
            message="Load main page failed",
            busy_timeout_s=self.settings.busy_timeout_s,
            poll_interval_s=self.settings.poll_interval_s,
            clock=self.clock,
        )
        if self.driver.exists(self.locators.uci_main_page):
            self.driver.wait_for_page_load(self.settings.page_load_timeout_s)
            self._barrier()
        else:
            switch_to_top_level(self.driver, page_load_timeout_s=self.settings.page_load_timeout_s)
        return LoginOutcome.success()

    def sign_out(self) -> None:
        click_when_clickable(
            self.driver,
            self.locators.account_manager,
            busy_timeout_s=self.settings.busy_timeout_s,
            poll_interval_s=self.settings.poll_interval_s,
            message="Account manager button not available",
            clock=self.clock,
        )
        click_when_clickable(
            self.driver,
            self.locators.sign_out,
            busy_timeout_s=self.settings.busy_timeout_s,
            poll_interval_s=self.settings.poll_interval_s,
            message="Sign out button not available",
            clock=self.clock,
        )
        self.driver.wait_for_page_load(self.settings.page_load_timeout_s)

    def initialize_test_modes(self) -> bool:
        """
        Reload the application with its automation/performance query flags.

        Returns:
            False when the current URL is unknown, True otherwise.
        """
        self.driver.switch_frame(None)
        self._wait_for_main_page_hard()

        url = self.driver.current_url()
        if not url:
            return False

        target = with_test_mode_params(url)
        if target == url:
            return True

        self.driver.navigate(target)
        self._wait_for_main_page_hard()
        return True

    # ---------------------------------------------------------------- helpers

    def _wait_for_main_page_hard(self) -> None:
        wait_for_main_page(
            self.driver,
            self.settings.main_page_timeout_s,
            locators=self.locators,
            policy="hard",
            busy_timeout_s=self.settings.busy_timeout_s,
            poll_interval_s=self.settings.poll_interval_s,
            clock=self.clock,
        )

    def _barrier(self) -> None:
        wait_for_busy_indicator_clear(
            self.driver,
            self.settings.busy_timeout_s,
            indicator=self.locators.busy_indicator,
            poll_interval_s=self.settings.poll_interval_s,
            clock=self.clock,
        )

    def _probe_kwargs(self) -> dict[str, Any]:
        return {
            "timeout_s": self.settings.probe_timeout_s,
            "busy_timeout_s": self.settings.busy_timeout_s,
            "poll_interval_s": self.settings.poll_interval_s,
            "clock": self.clock,
        }

    def _transition(self, state: LoginState) -> None:
        self.state = state
        self.history.append(state)
        logger.info(f"Login state -> {state.value}")


def with_test_mode_params(url: str) -> str:
    """Append the automation/perf query flags to ``url`` when they are missing."""
    parts = urlsplit(url)
    present = parse_qs(parts.query.lower())
    missing = [f"{key}={value}" for key, value in TEST_MODE_PARAMS if key not in present]
    if not missing:
        return url
    query = "&".join(([parts.query] if parts.query else []) + missing)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


__all__ = [
    "LoginFlow",
    "LoginState",
    "RedirectAction",
    "RedirectContext",
    "with_test_mode_params",
]
