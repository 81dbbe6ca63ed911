"""
Storage Interface - Read access to browser-side key/value stores.

Used only to resolve credentials referenced by recorded request steps.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional


class StorageKind(str, Enum):
    """Browser storage sources a credential can live in."""
    LOCAL_STORAGE = "localStorage"
    SESSION_STORAGE = "sessionStorage"
    COOKIE = "cookie"
    
    @classmethod
    def _missing_(cls, value: Any) -> Optional["StorageKind"]:
        # Recordings also use snake_case names
        aliases = {
            "local_storage": cls.LOCAL_STORAGE,
            "session_storage": cls.SESSION_STORAGE,
            "cookies": cls.COOKIE,
        }
        if isinstance(value, str):
            return aliases.get(value.lower())
        return None


class IStorageAccessor(ABC):
    """Reads a single value from a browser storage source."""
    
    @abstractmethod
    async def get(self, kind: StorageKind, key: str) -> Optional[str]:
        """
        Read a value.
        
        Args:
            kind: Storage source
            key: Key (or cookie name) to read
            
        Returns:
            The stored string, or None when absent
        """
        ...
