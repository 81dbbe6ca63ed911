"""
Browsers module - Playwright bindings for the runtime's collaborators.
"""

from replay_runtime.browsers.playwright_adapters import (
    PlaywrightLocator,
    PlaywrightLocatorFactory,
    PlaywrightStorageAccessor,
    PlaywrightRequestTransport,
)

__all__ = [
    "PlaywrightLocator",
    "PlaywrightLocatorFactory",
    "PlaywrightStorageAccessor",
    "PlaywrightRequestTransport",
]
