"""
Interfaces module - Contracts for the collaborators the runtime consumes.
"""

from replay_runtime.interfaces.locator import (
    LocatorKind,
    LocatorDescriptor,
    ILocator,
    ILocatorFactory,
)
from replay_runtime.interfaces.storage import StorageKind, IStorageAccessor
from replay_runtime.interfaces.transport import (
    PreparedRequest,
    TransportResponse,
    IHttpTransport,
)

__all__ = [
    "LocatorKind",
    "LocatorDescriptor",
    "ILocator",
    "ILocatorFactory",
    "StorageKind",
    "IStorageAccessor",
    "PreparedRequest",
    "TransportResponse",
    "IHttpTransport",
]
