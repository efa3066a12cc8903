"""
Browser backends for syncwright.

- DomDriver: protocol consumed by the wait/retry engine and the login flow
- PlaywrightBackend: implementation over Playwright's sync API
"""

from .playwright_backend import DEFAULT_BUSY_SCRIPT, PlaywrightBackend
from .protocol import DomDriver, FrameRef

__all__ = [
    "DEFAULT_BUSY_SCRIPT",
    "DomDriver",
    "FrameRef",
    "PlaywrightBackend",
]
