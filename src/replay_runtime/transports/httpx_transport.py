"""
httpx Transport - Send request steps without a browser.

Used when a RequestSpec is replayed outside a page (CLI, data checks).
Storage-backed credentials need a page, so pair this transport with a
storage accessor only if one is available.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from replay_runtime.exceptions import NetworkError
from replay_runtime.interfaces.transport import (
    IHttpTransport,
    PreparedRequest,
    TransportResponse,
)

logger = logging.getLogger(__name__)


class HttpxTransport(IHttpTransport):
    """
    IHttpTransport backed by an ``httpx.AsyncClient``.
    
    Example:
        >>> async with HttpxTransport() as transport:
        ...     executor = HttpRequestExecutor(transport)
        ...     response = await executor.execute(spec)
    """
    
    def __init__(
        self,
        timeout: Optional[float] = None,
        verify: bool = True,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the transport.
        
        Args:
            timeout: Request timeout in seconds; None keeps httpx's default
            verify: Verify TLS certificates
            client: Existing client to use instead of creating one
        """
        self._timeout = timeout
        self._verify = verify
        self._client = client
        self._owns_client = client is None
    
    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            options: Dict[str, Any] = {"verify": self._verify}
            if self._timeout is not None:
                options["timeout"] = self._timeout
            self._client = httpx.AsyncClient(**options)
        return self._client
    
    async def send(self, request: PreparedRequest) -> TransportResponse:
        """Send the request; transport failures raise NetworkError."""
        client = await self._get_client()
        
        options: Dict[str, Any] = {"headers": request.headers}
        if isinstance(request.body, (str, bytes)):
            options["content"] = request.body
        elif request.body is not None:
            options["json"] = request.body
        
        try:
            response = await client.request(request.method, request.url, **options)
        except httpx.TransportError as e:
            raise NetworkError(
                f"{request.method} {request.url} failed: {e}",
                url=request.url,
                method=request.method,
            ) from e
        
        return TransportResponse(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
            text=response.text,
        )
    
    async def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
    
    async def __aenter__(self) -> "HttpxTransport":
        return self
    
    async def __aexit__(self, *exc: Any) -> None:
        await self.close()
