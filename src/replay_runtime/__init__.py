"""
Replay Runtime - Reliability helpers embedded in recorded browser scripts.

A recorded script replays user interactions against a live, asynchronously
loading page. This package provides the runtime behavior that keeps such a
script reliable:

- waiting for the page to go network-idle between steps
- resolving ranked candidate locators to exactly one element
- executing declarative HTTP request steps with storage-backed credentials
- reconciling one count across UI, database and API sources

Example:
    >>> from replay_runtime import ReplaySession, LocatorDescriptor
    >>> async with ReplaySession.for_page(page) as session:
    ...     async with session.step(1, "Click Save"):
    ...         resolved = await session.resolve([LocatorDescriptor.role("button", name="Save")])
    ...         await resolved.handle.locator.click()
"""

__version__ = "0.1.0"

# Public API exports
from replay_runtime.config.settings import Settings
from replay_runtime.interfaces.locator import LocatorDescriptor, LocatorKind
from replay_runtime.engine.idle_monitor import IdleMonitor
from replay_runtime.engine.locator_resolver import LocatorResolver, ResolvedElement
from replay_runtime.engine.request_spec import RequestSpec
from replay_runtime.engine.request_executor import HttpRequestExecutor, RawResponse
from replay_runtime.engine.fact_reconciler import FactReconciler
from replay_runtime.engine.session import ReplaySession

__all__ = [
    "Settings",
    "LocatorDescriptor",
    "LocatorKind",
    "IdleMonitor",
    "LocatorResolver",
    "ResolvedElement",
    "RequestSpec",
    "HttpRequestExecutor",
    "RawResponse",
    "FactReconciler",
    "ReplaySession",
    "__version__",
]
