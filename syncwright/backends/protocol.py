"""
DOM interaction provider protocol.

The synchronization engine and the login flow only talk to the browser through
this interface, so any automation framework can sit behind it. Handles returned
by ``find`` are opaque and only valid for the poll tick that produced them.

Implementations may also define:
- ``transient_errors``: tuple of exception types raised while the DOM is being
  re-rendered; polls treat them as "not yet" instead of failing.
- ``is_busy()``: application-specific busy signal used by the transaction barrier.
"""

from __future__ import annotations

from typing import Any, Protocol, Union, runtime_checkable

from ..locators import Locator

FrameRef = Union[int, str, None]


@runtime_checkable
class DomDriver(Protocol):
    def find(self, locator: Locator) -> Any | None:
        """Resolve ``locator`` to a live handle, or None."""
        ...

    def exists(self, locator: Locator) -> bool:
        ...

    def is_visible(self, handle: Any) -> bool:
        ...

    def is_enabled(self, handle: Any) -> bool:
        ...

    def click(self, handle: Any) -> None:
        ...

    def type_text(self, handle: Any, text: str) -> None:
        ...

    def clear(self, handle: Any) -> None:
        ...

    def press(self, handle: Any, key: str) -> None:
        ...

    def get_value(self, handle: Any) -> str | None:
        ...

    def current_url(self) -> str:
        ...

    def navigate(self, uri: str) -> None:
        ...

    def switch_frame(self, ref: FrameRef) -> None:
        """Switch the execution context. ``None`` selects the top-level document."""
        ...

    def wait_for_page_load(self, timeout_s: float) -> None:
        ...


__all__ = ["DomDriver", "FrameRef"]
