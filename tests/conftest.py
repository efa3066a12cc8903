from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from syncwright.locators import Locator


class FakeClock:
    """Deterministic time source: sleeping advances time instantly."""

    def __init__(self, start: float = 0.0, epoch: float = 1_700_000_000.0) -> None:
        self.t = start
        self.epoch = epoch
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.t

    def now(self) -> float:
        return self.epoch + self.t

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.t += seconds


class FakeElement:
    def __init__(self, name: str, *, visible: bool = True, enabled: bool = True, value: str = "") -> None:
        self.name = name
        self.visible = visible
        self.enabled = enabled
        self.value = value


class FakeDriver:
    """
    In-memory DomDriver.

    Elements are keyed by Locator. Behaviour is scripted with ``on_press``,
    ``on_click`` and ``on_navigate`` hooks and with ``at(t, fn)`` events that
    fire once the clock reaches ``t``.
    """

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.clock = clock
        self.elements: dict[Locator, FakeElement] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.url = ""
        self.frames = 0
        self.on_press: dict[str, Callable[[FakeElement, str], None]] = {}
        self.on_click: dict[str, Callable[[FakeElement], None]] = {}
        self.on_navigate: Callable[[str], None] | None = None
        self._scheduled: list[tuple[float, Callable[[], None]]] = []

    # scripting helpers
    def add(self, locator: Locator, **kwargs: Any) -> FakeElement:
        element = FakeElement(locator.description or locator.describe(), **kwargs)
        self.elements[locator] = element
        return element

    def remove(self, locator: Locator) -> None:
        self.elements.pop(locator, None)

    def at(self, t: float, fn: Callable[[], None]) -> None:
        self._scheduled.append((t, fn))

    def calls_of(self, kind: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == kind]

    def _fire_due(self) -> None:
        if self.clock is None:
            return
        due = [item for item in self._scheduled if item[0] <= self.clock.monotonic()]
        for item in due:
            self._scheduled.remove(item)
            item[1]()

    # DomDriver
    def find(self, locator: Locator) -> FakeElement | None:
        self._fire_due()
        self.calls.append(("find", locator))
        return self.elements.get(locator)

    def exists(self, locator: Locator) -> bool:
        self._fire_due()
        return locator in self.elements

    def is_visible(self, handle: FakeElement) -> bool:
        return handle.visible

    def is_enabled(self, handle: FakeElement) -> bool:
        return handle.enabled

    def click(self, handle: FakeElement) -> None:
        self.calls.append(("click", handle.name))
        hook = self.on_click.get(handle.name)
        if hook is not None:
            hook(handle)

    def type_text(self, handle: FakeElement, text: str) -> None:
        self.calls.append(("type", handle.name, text))
        handle.value += text

    def clear(self, handle: FakeElement) -> None:
        self.calls.append(("clear", handle.name))
        handle.value = ""

    def press(self, handle: FakeElement, key: str) -> None:
        self.calls.append(("press", handle.name, key))
        hook = self.on_press.get(handle.name)
        if hook is not None:
            hook(handle, key)

    def get_value(self, handle: FakeElement) -> str:
        return handle.value

    def current_url(self) -> str:
        return self.url

    def navigate(self, uri: str) -> None:
        self.calls.append(("navigate", uri))
        self.url = uri
        if self.on_navigate is not None:
            self.on_navigate(uri)

    def switch_frame(self, ref: Any) -> None:
        if isinstance(ref, int) and ref >= self.frames:
            raise LookupError(f"No child frame at index {ref}")
        self.calls.append(("switch_frame", ref))

    def wait_for_page_load(self, timeout_s: float) -> None:
        self.calls.append(("wait_for_page_load", timeout_s))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def driver(clock: FakeClock) -> FakeDriver:
    return FakeDriver(clock)
