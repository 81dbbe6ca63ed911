"""
HTTP Request Executor - Build and send one declarative request.

The executor turns a RequestSpec into a concrete request (query string,
headers, computed Authorization, body), hands it to a transport, and wraps
the answer in a RawResponse. Credentials referenced by the request spec are read
from browser storage at execution time through a storage accessor and never
cached.

There are no retries and no timeout of the executor's own: the transport's
default applies.
"""

import base64
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlencode, urlsplit, parse_qsl

from pydantic import ValidationError

from replay_runtime.engine.request_spec import (
    AuthType,
    BodyType,
    KeyValue,
    RequestAuth,
    RequestBody,
    RequestSpec,
)
from replay_runtime.exceptions import InvalidInputError
from replay_runtime.interfaces.storage import IStorageAccessor, StorageKind
from replay_runtime.interfaces.transport import IHttpTransport, PreparedRequest

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = {"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"}


@dataclass
class RawResponse:
    """
    Structured result of a request step.
    
    Attributes:
        status: Numeric HTTP status
        status_text: Reason phrase
        headers: Response headers
        body: JSON-decoded body, or the raw text when it isn't JSON
        request: The request that produced this response
        duration_ms: Wall-clock time spent in the transport
    """
    status: int
    status_text: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    request: Optional[PreparedRequest] = None
    duration_ms: float = 0.0
    
    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "endpoint": self.request.url if self.request else "",
            "method": self.request.method if self.request else "",
            "status": self.status,
            "status_text": self.status_text,
            "headers": self.headers,
            "payload": self.body,
            "duration_ms": round(self.duration_ms, 2),
        }


class HttpRequestExecutor:
    """
    Execute RequestSpecs through a transport.
    
    Example:
        >>> executor = HttpRequestExecutor(
        ...     PlaywrightRequestTransport(page),
        ...     storage=PlaywrightStorageAccessor(page),
        ... )
        >>> response = await executor.execute(spec)
        >>> response.body["total_projects"]
    """
    
    def __init__(
        self,
        transport: IHttpTransport,
        storage: Optional[IStorageAccessor] = None,
    ):
        """
        Initialize the executor.
        
        Args:
            transport: Sends prepared requests
            storage: Reads credentials referenced by the request; without one,
                storage references resolve to nothing
        """
        self._transport = transport
        self._storage = storage
    
    async def execute(self, spec: Union[RequestSpec, Dict[str, Any]]) -> RawResponse:
        """
        Build and send one request.
        
        Args:
            spec: RequestSpec or its dict form
            
        Returns:
            The structured response (any HTTP status)
            
        Raises:
            InvalidInputError: The request spec is malformed
            NetworkError: The transport failed
        """
        request = await self.build_request(spec)
        logger.info(f"Sending {request.method} {request.url}")
        logger.debug(f"Request headers: {request.redacted_headers()}")
        
        start = time.time()
        raw = await self._transport.send(request)
        duration_ms = (time.time() - start) * 1000
        
        logger.info(f"{request.method} {request.url} -> {raw.status} ({duration_ms:.0f}ms)")
        return RawResponse(
            status=raw.status,
            status_text=raw.status_text,
            headers=dict(raw.headers),
            body=parse_body(raw.text),
            request=request,
            duration_ms=duration_ms,
        )
    
    async def build_request(self, spec: Union[RequestSpec, Dict[str, Any]]) -> PreparedRequest:
        """
        Build the concrete request without sending it.
        
        Args:
            spec: RequestSpec or its dict form
            
        Returns:
            The prepared request
        """
        spec = coerce_spec(spec)
        
        headers = build_headers(spec.headers)
        authorization = await self._resolve_authorization(spec.auth)
        if authorization:
            for name in [k for k in headers if k.lower() == "authorization"]:
                del headers[name]
            headers["Authorization"] = authorization
        
        return PreparedRequest(
            method=normalize_method(spec.method),
            url=build_url(spec.url, spec.params),
            headers=headers,
            body=build_body(spec.body),
        )
    
    async def _resolve_authorization(self, auth: RequestAuth) -> Optional[str]:
        """Compute the Authorization header value, or None to omit it."""
        if auth.type == AuthType.BEARER:
            if auth.token and auth.token.strip():
                return f"Bearer {auth.token.strip()}"
            
            ref = auth.token_storages[0] if auth.token_storages else None
            if ref is None or not ref.key:
                return None
            token = await self._read_storage(ref.type, ref.key)
            return f"Bearer {token}" if token else None
        
        if auth.type == AuthType.BASIC:
            if auth.username and auth.password:
                return basic_credentials(auth.username, auth.password)
            
            ref = auth.basic_auth_storages[0] if auth.basic_auth_storages else None
            if ref is None or not ref.username_key or not ref.password_key:
                return None
            username = await self._read_storage(ref.type, ref.username_key)
            password = await self._read_storage(ref.type, ref.password_key)
            if username and password:
                return basic_credentials(username, password)
            return None
        
        return None
    
    async def _read_storage(self, kind: StorageKind, key: str) -> Optional[str]:
        """Read one credential; any failure resolves to nothing."""
        if self._storage is None:
            logger.debug(f"No storage accessor; cannot read {kind.value}[{key!r}]")
            return None
        try:
            value = await self._storage.get(kind, key)
        except Exception as e:
            logger.warning(f"Could not read {kind.value}[{key!r}]: {e}")
            return None
        if not value:
            logger.debug(f"{kind.value}[{key!r}] is empty")
            return None
        return value


def coerce_spec(spec: Union[RequestSpec, Dict[str, Any]]) -> RequestSpec:
    """Validate a spec given as a dict."""
    if isinstance(spec, RequestSpec):
        return spec
    if not isinstance(spec, dict):
        raise InvalidInputError(
            f"Request spec must be a mapping, got {type(spec).__name__}",
            argument="spec",
        )
    try:
        return RequestSpec.model_validate(spec)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid request spec: {e}", argument="spec") from e


def normalize_method(method: str) -> str:
    """Upper-case the method; unknown methods fall back to GET."""
    upper = (method or "get").strip().upper()
    if upper not in SUPPORTED_METHODS:
        logger.warning(f"Unsupported method {method!r}, sending GET")
        return "GET"
    return upper


def build_url(url: str, params: List[KeyValue]) -> str:
    """
    Append non-blank params as a query string.
    
    Uses ``&`` when the URL already carries a ``?``, ``?`` otherwise.
    
    Example:
        >>> build_url("https://x/y", [KeyValue(key="a", value="1")])
        'https://x/y?a=1'
        >>> build_url("https://x/y?z=1", [KeyValue(key="a", value="1")])
        'https://x/y?z=1&a=1'
    """
    pairs = [(str(p.key).strip(), str(p.value).strip()) for p in params if not p.is_blank]
    if not pairs:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode(pairs)}"


def build_headers(headers: List[KeyValue]) -> Dict[str, str]:
    """Explicit headers with blank entries dropped; later entries win."""
    return {str(h.key).strip(): str(h.value).strip() for h in headers if not h.is_blank}


def build_body(body: RequestBody) -> Optional[Any]:
    """
    Build the payload.
    
    json sends ``content`` unchanged; form sends a flat name/value map with
    string values; none sends nothing.
    """
    if body.type == BodyType.JSON:
        return body.content
    if body.type == BodyType.FORM:
        return {
            str(f.name).strip(): "" if f.value is None else str(f.value)
            for f in body.form_data
            if f.name is not None and str(f.name).strip()
        }
    return None


def basic_credentials(username: str, password: str) -> str:
    """Basic Authorization header value."""
    encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"


def parse_body(text: str) -> Any:
    """JSON-decode a body, falling back to the raw text."""
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return text


def split_url(url: str) -> Dict[str, Any]:
    """Break a URL into base, path and query params for reports."""
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return {"base_url": url, "path": "", "query_params": {}}
    return {
        "base_url": f"{parts.scheme}://{parts.netloc}",
        "path": parts.path,
        "query_params": dict(parse_qsl(parts.query, keep_blank_values=True)),
    }
