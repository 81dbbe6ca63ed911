"""
Transport Interface - The fetch-like function behind request steps.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class PreparedRequest:
    """
    A fully built request, ready to send.
    
    Attributes:
        method: Upper-case HTTP method
        url: Final URL including the query string
        headers: Headers to send, including any computed Authorization
        body: Payload; a dict/list is sent as JSON, a string as-is,
            None means no body
    """
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Any] = None
    
    def redacted_headers(self) -> Dict[str, str]:
        """Headers safe to log or export."""
        return {
            k: ("***" if k.lower() in ("authorization", "cookie") else v)
            for k, v in self.headers.items()
        }


@dataclass
class TransportResponse:
    """Raw response as returned by a transport."""
    status: int
    status_text: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    text: str = ""


class IHttpTransport(ABC):
    """
    Sends one prepared request.
    
    Implementations raise NetworkError for DNS, connection and timeout
    failures. HTTP error statuses are returned, not raised.
    """
    
    @abstractmethod
    async def send(self, request: PreparedRequest) -> TransportResponse:
        """
        Send a request.
        
        Args:
            request: The prepared request
            
        Returns:
            The transport response
        """
        ...
