"""
Locators and wait conditions.

A Locator is an immutable description of "find the element matching this query".
It never holds a live element: every poll tick resolves it again through the
driver, because the application may destroy and re-create the node at any time.

Example:
    from syncwright.locators import Condition, Locator

    submit = Locator.xpath("//button[@type='submit']", description="submit button")
    handle = wait_until(driver, submit, Condition.CLICKABLE, timeout_s=5)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

LocatorKind = Literal["xpath", "css", "id"]


class Condition(Enum):
    """What must hold for a resolved element before a wait succeeds."""

    EXISTS = "exists"
    VISIBLE = "visible"
    CLICKABLE = "clickable"


@dataclass(frozen=True)
class Locator:
    """Opaque, reusable element query with an optional scoping parent."""

    selector: str
    kind: LocatorKind = "xpath"
    scope: Locator | None = None
    description: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.selector or not self.selector.strip():
            raise ValueError("Locator selector must be a non-empty string")
        if self.kind not in ("xpath", "css", "id"):
            raise ValueError(f"Unsupported locator kind: {self.kind!r}")

    @classmethod
    def xpath(cls, selector: str, *, scope: Locator | None = None, description: str | None = None) -> Locator:
        return cls(selector=selector, kind="xpath", scope=scope, description=description)

    @classmethod
    def css(cls, selector: str, *, scope: Locator | None = None, description: str | None = None) -> Locator:
        return cls(selector=selector, kind="css", scope=scope, description=description)

    @classmethod
    def id(cls, element_id: str, *, scope: Locator | None = None, description: str | None = None) -> Locator:
        return cls(selector=element_id, kind="id", scope=scope, description=description)

    def within(self, scope: Locator) -> Locator:
        """Return a copy of this locator resolved relative to ``scope``."""
        return Locator(selector=self.selector, kind=self.kind, scope=scope, description=self.description)

    def describe(self) -> str:
        label = self.description or f"{self.kind}={self.selector}"
        if self.scope is not None:
            return f"{label} (within {self.scope.describe()})"
        return label

    def __str__(self) -> str:
        return self.describe()


# Application-level busy/loading signal. Absent means the DOM is stable.
DEFAULT_BUSY_INDICATOR = Locator.xpath(
    "//*[@id='loadingIndicator' or @data-id='loadingIndicator' or @id='progressIndicatorContainer']",
    description="busy indicator",
)


@dataclass(frozen=True)
class LoginLocators:
    """
    Element queries used by the login flow and the main-page checks.

    Defaults target a Microsoft identity platform sign-in page in front of a
    model-driven business application. Pass a custom instance for other tenants.
    """

    username: Locator = Locator.xpath("//input[@type='email']", description="username input")
    password: Locator = Locator.xpath("//input[@type='password']", description="password input")
    one_time_code: Locator = Locator.xpath("//input[@name='otc']", description="one-time code input")
    stay_signed_in: Locator = Locator.xpath("//*[@id='idSIButton9']", description="stay signed in button")
    use_another_account: Locator = Locator.id("otherTileText", description="use another account tile")
    work_account_tile: Locator = Locator.id("aadTile", description="work or school account tile")
    main_page: Locator = Locator.xpath(
        "//*[contains(@id,'crmTopBar') or contains(@data-id,'topBar')]",
        description="main page",
    )
    uci_main_page: Locator = Locator.xpath(
        "//*[contains(@data-id,'topBar')]",
        description="unified interface main page",
    )
    account_manager: Locator = Locator.xpath(
        "//button[@id='mectrl_main_trigger']",
        description="account manager button",
    )
    sign_out: Locator = Locator.xpath(
        "//button[@id='mectrl_body_signOut']",
        description="sign out button",
    )
    busy_indicator: Locator = DEFAULT_BUSY_INDICATOR


__all__ = [
    "Condition",
    "DEFAULT_BUSY_INDICATOR",
    "Locator",
    "LocatorKind",
    "LoginLocators",
]
