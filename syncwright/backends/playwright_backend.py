"""
DomDriver implementation over Playwright's synchronous API.

Usage:
    from playwright.sync_api import sync_playwright
    from syncwright.backends import PlaywrightBackend
    from syncwright.auth import LoginFlow

    with sync_playwright() as pw:
        browser = pw.chromium.launch()
        page = browser.new_page()
        driver = PlaywrightBackend(page)
        outcome = LoginFlow(driver).login("https://org.crm.dynamics.com/", credential)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from playwright.sync_api import Error as PlaywrightError

from ..locators import Locator
from .protocol import FrameRef

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, Frame, Page

logger = logging.getLogger(__name__)

# True while the application reports pending work. Pages without the tracker are idle.
DEFAULT_BUSY_SCRIPT = """
(() => {
    try {
        return typeof UCWorkBlockTracker !== 'undefined' && !UCWorkBlockTracker.isAppIdle();
    } catch (e) {
        return false;
    }
})()
"""

_VALUE_SCRIPT = "el => ('value' in el) ? el.value : el.textContent"


class PlaywrightBackend:
    """
    Playwright-backed DOM driver.

    Keeps a "current frame" so ``switch_frame`` behaves like a WebDriver context
    switch. Navigation resets the context to the top-level document.
    """

    transient_errors = (PlaywrightError,)

    def __init__(self, page: Page, *, busy_script: str | None = DEFAULT_BUSY_SCRIPT) -> None:
        self.page = page
        self._frame: Frame = page.main_frame
        self._busy_script = busy_script

    @property
    def frame(self) -> Frame:
        return self._frame

    @staticmethod
    def selector_for(locator: Locator) -> str:
        if locator.kind == "xpath":
            return f"xpath={locator.selector}"
        if locator.kind == "id":
            return f"id={locator.selector}"
        return locator.selector

    def find(self, locator: Locator) -> ElementHandle | None:
        if locator.scope is not None:
            parent = self.find(locator.scope)
            if parent is None:
                return None
            return parent.query_selector(self.selector_for(locator))
        return self._frame.query_selector(self.selector_for(locator))

    def exists(self, locator: Locator) -> bool:
        return self.find(locator) is not None

    def is_visible(self, handle: ElementHandle) -> bool:
        return handle.is_visible()

    def is_enabled(self, handle: ElementHandle) -> bool:
        return handle.is_enabled()

    def click(self, handle: ElementHandle) -> None:
        handle.click()

    def type_text(self, handle: ElementHandle, text: str) -> None:
        handle.type(text)

    def clear(self, handle: ElementHandle) -> None:
        handle.fill("")

    def press(self, handle: ElementHandle, key: str) -> None:
        handle.press(key)

    def get_value(self, handle: ElementHandle) -> str | None:
        value: Any = handle.evaluate(_VALUE_SCRIPT)
        return None if value is None else str(value)

    def current_url(self) -> str:
        return self.page.url

    def navigate(self, uri: str) -> None:
        self.page.goto(uri)
        self._frame = self.page.main_frame

    def switch_frame(self, ref: FrameRef) -> None:
        if ref is None:
            self._frame = self.page.main_frame
            return
        if isinstance(ref, int):
            children = self._frame.child_frames
            if ref < 0 or ref >= len(children):
                raise LookupError(f"No child frame at index {ref}")
            self._frame = children[ref]
            return
        frame = self.page.frame(name=ref)
        if frame is None:
            raise LookupError(f"No frame named {ref!r}")
        self._frame = frame

    def wait_for_page_load(self, timeout_s: float) -> None:
        self._frame.wait_for_load_state("load", timeout=timeout_s * 1000)

    def is_busy(self) -> bool:
        if not self._busy_script:
            return False
        return bool(self._frame.evaluate(self._busy_script))


__all__ = ["DEFAULT_BUSY_SCRIPT", "PlaywrightBackend"]
