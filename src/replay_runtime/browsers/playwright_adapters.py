"""
Playwright Adapters - Bind the runtime's collaborators to a Playwright page.

Provides:
- PlaywrightLocatorFactory: dispatches structured descriptors to
  ``page.locator`` / ``page.get_by_*`` (no expression evaluation)
- PlaywrightStorageAccessor: reads localStorage, sessionStorage and cookies
- PlaywrightRequestTransport: sends requests through ``page.request`` so they
  share the page's cookies and proxy settings
"""

from typing import Any, Callable, Dict, Optional
from urllib.parse import unquote
import logging

from playwright.async_api import Error as PlaywrightError

from replay_runtime.exceptions import InvalidInputError, NetworkError
from replay_runtime.interfaces.locator import (
    ILocator,
    ILocatorFactory,
    LocatorDescriptor,
    LocatorKind,
)
from replay_runtime.interfaces.storage import IStorageAccessor, StorageKind
from replay_runtime.interfaces.transport import (
    IHttpTransport,
    PreparedRequest,
    TransportResponse,
)

logger = logging.getLogger(__name__)

ROLE_OPTIONS = {
    "name",
    "exact",
    "checked",
    "disabled",
    "expanded",
    "include_hidden",
    "level",
    "pressed",
    "selected",
}

OUTER_HTML_JS = "el => el.outerHTML"


class PlaywrightLocator(ILocator):
    """
    Playwright implementation of ILocator.
    
    Wraps a Playwright Locator; the raw locator stays available through
    ``locator`` for the step's own action (click, fill, expect, ...).
    """
    
    def __init__(self, locator: Any):
        """
        Initialize the wrapper.
        
        Args:
            locator: Playwright Locator
        """
        self._locator = locator
    
    @property
    def locator(self) -> Any:
        """The underlying Playwright Locator."""
        return self._locator
    
    async def wait_attached(self, timeout_ms: int) -> None:
        await self._locator.first.wait_for(state="attached", timeout=timeout_ms)
    
    async def count(self) -> int:
        return await self._locator.count()
    
    def first(self) -> "PlaywrightLocator":
        return PlaywrightLocator(self._locator.first)
    
    async def outer_html(self) -> str:
        return await self._locator.first.evaluate(OUTER_HTML_JS)


def _text_options(options: Dict[str, Any]) -> Dict[str, Any]:
    return {"exact": options["exact"]} if options.get("exact") is not None else {}


class PlaywrightLocatorFactory(ILocatorFactory):
    """
    Build Playwright locators from descriptors.
    
    Chained descriptors are built parent first, and the child strategy is
    applied on the parent locator.
    """
    
    def __init__(self, page: Any):
        """
        Initialize the factory.
        
        Args:
            page: Playwright Page
        """
        self._page = page
        self._strategies: Dict[LocatorKind, Callable[[Any, LocatorDescriptor], Any]] = {
            LocatorKind.CSS: lambda root, d: root.locator(d.value),
            LocatorKind.XPATH: lambda root, d: root.locator(f"xpath={d.value}"),
            LocatorKind.ROLE: lambda root, d: root.get_by_role(
                d.value, **{k: v for k, v in d.options.items() if k in ROLE_OPTIONS}
            ),
            LocatorKind.TEXT: lambda root, d: root.get_by_text(d.value, **_text_options(d.options)),
            LocatorKind.TEST_ID: lambda root, d: root.get_by_test_id(d.value),
            LocatorKind.LABEL: lambda root, d: root.get_by_label(d.value, **_text_options(d.options)),
            LocatorKind.PLACEHOLDER: lambda root, d: root.get_by_placeholder(d.value, **_text_options(d.options)),
            LocatorKind.ALT_TEXT: lambda root, d: root.get_by_alt_text(d.value, **_text_options(d.options)),
            LocatorKind.TITLE: lambda root, d: root.get_by_title(d.value, **_text_options(d.options)),
        }
    
    def create(self, descriptor: LocatorDescriptor) -> PlaywrightLocator:
        return PlaywrightLocator(self._build(descriptor))
    
    def _build(self, descriptor: LocatorDescriptor) -> Any:
        root = self._page if descriptor.parent is None else self._build(descriptor.parent)
        strategy = self._strategies.get(descriptor.kind)
        if strategy is None:
            raise InvalidInputError(
                f"Unsupported locator kind: {descriptor.kind}",
                argument="descriptor",
            )
        return strategy(root, descriptor)


class PlaywrightStorageAccessor(IStorageAccessor):
    """
    Read browser storage from a live page.
    
    Cookies are read from the browser context for the page's URL, which
    includes HttpOnly cookies that page scripts cannot see.
    """
    
    def __init__(self, page: Any):
        self._page = page
    
    async def get(self, kind: StorageKind, key: str) -> Optional[str]:
        if kind == StorageKind.LOCAL_STORAGE:
            value = await self._page.evaluate("k => window.localStorage.getItem(k)", key)
        elif kind == StorageKind.SESSION_STORAGE:
            value = await self._page.evaluate("k => window.sessionStorage.getItem(k)", key)
        elif kind == StorageKind.COOKIE:
            value = await self._read_cookie(key)
        else:
            raise InvalidInputError(f"Unsupported storage kind: {kind}", argument="kind")
        return value or None
    
    async def _read_cookie(self, name: str) -> Optional[str]:
        cookies = await self._page.context.cookies(self._page.url)
        for cookie in cookies:
            if cookie.get("name") == name:
                return unquote(cookie.get("value", ""))
        return None


class PlaywrightRequestTransport(IHttpTransport):
    """
    Send requests through a Playwright APIRequestContext.
    
    Accepts a Page (uses ``page.request``) or an APIRequestContext.
    """
    
    def __init__(self, page_or_request: Any, timeout_ms: Optional[float] = None):
        """
        Initialize the transport.
        
        Args:
            page_or_request: Playwright Page or APIRequestContext
            timeout_ms: Request timeout; None keeps Playwright's default
        """
        self._request = getattr(page_or_request, "request", page_or_request)
        self._timeout_ms = timeout_ms
    
    async def send(self, request: PreparedRequest) -> TransportResponse:
        options: Dict[str, Any] = {
            "method": request.method,
            "headers": request.headers,
        }
        if request.body is not None:
            options["data"] = request.body
        if self._timeout_ms is not None:
            options["timeout"] = self._timeout_ms
        
        try:
            response = await self._request.fetch(request.url, **options)
            text = await response.text()
        except PlaywrightError as e:
            raise NetworkError(
                f"{request.method} {request.url} failed: {e}",
                url=request.url,
                method=request.method,
            ) from e
        
        return TransportResponse(
            status=response.status,
            status_text=response.status_text,
            headers=dict(response.headers),
            text=text,
        )
