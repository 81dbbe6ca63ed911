"""
Idle Monitor - Wait for a page to go network-idle between recorded steps.

The monitor listens to a page's request events, keeps a pending-request
count for xhr/fetch traffic, and polls that count until it has stayed at zero
for a full idle window. A hard deadline bounds every wait: pages that poll the
backend forever still let the script move on.

Example:
    >>> monitor = IdleMonitor()
    >>> monitor.attach(page)
    >>> await page.goto("https://example.com")
    >>> await monitor.wait_for_idle()
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Iterable, Optional, TYPE_CHECKING

from replay_runtime.engine.request_counter import RequestCounter

if TYPE_CHECKING:
    from replay_runtime.config.settings import IdleSettings

logger = logging.getLogger(__name__)

REQUEST_STARTED = "request"
REQUEST_FINISHED = "requestfinished"
REQUEST_FAILED = "requestfailed"


class IdleMonitor:
    """
    Polling network-idle waiter for one page/session.
    
    The pending count is instance state, so several pages can be monitored
    side by side. Re-attaching to another page resets the count.
    """
    
    def __init__(
        self,
        timeout_ms: int = 10000,
        idle_window_ms: int = 500,
        poll_interval_ms: int = 100,
        resource_types: Iterable[str] = ("xhr", "fetch"),
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize the monitor.
        
        Args:
            timeout_ms: Default deadline for wait_for_idle
            idle_window_ms: Default continuous idle duration required
            poll_interval_ms: Delay between two polls of the counter
            resource_types: Request resource types that count as pending
            clock: Monotonic clock in seconds
            sleep: Cooperative sleep taking seconds
        """
        self.timeout_ms = timeout_ms
        self.idle_window_ms = idle_window_ms
        self.poll_interval_ms = poll_interval_ms
        self.resource_types = frozenset(t.lower() for t in resource_types)
        self._clock = clock
        self._sleep = sleep
        self._counter = RequestCounter()
        self._source: Optional[Any] = None
    
    @classmethod
    def from_settings(cls, settings: "IdleSettings") -> "IdleMonitor":
        return cls(
            timeout_ms=settings.timeout_ms,
            idle_window_ms=settings.idle_window_ms,
            poll_interval_ms=settings.poll_interval_ms,
            resource_types=settings.resource_types,
        )
    
    @property
    def counter(self) -> RequestCounter:
        return self._counter
    
    @property
    def pending(self) -> int:
        return self._counter.pending
    
    @property
    def is_attached(self) -> bool:
        return self._source is not None
    
    def attach(self, source: Any) -> None:
        """
        Subscribe to a network-event source (usually a Playwright page).
        
        The source must expose ``on(event, handler)`` and emit request
        objects carrying a ``resource_type``. Any previously attached
        source is detached first and the pending count starts from zero.
        
        Args:
            source: Page or other event emitter
        """
        if self._source is not None:
            self.detach()
        
        self._counter.reset()
        source.on(REQUEST_STARTED, self._on_request_started)
        source.on(REQUEST_FINISHED, self._on_request_done)
        source.on(REQUEST_FAILED, self._on_request_done)
        self._source = source
        logger.debug("Idle monitor attached")
    
    def detach(self) -> None:
        """Unsubscribe from the current source, if any."""
        source = self._source
        if source is None:
            return
        
        remove = getattr(source, "remove_listener", None)
        if remove is not None:
            remove(REQUEST_STARTED, self._on_request_started)
            remove(REQUEST_FINISHED, self._on_request_done)
            remove(REQUEST_FAILED, self._on_request_done)
        self._source = None
        logger.debug("Idle monitor detached")
    
    def is_tracked(self, request: Any) -> bool:
        """Check whether a request counts towards the pending total."""
        resource_type = getattr(request, "resource_type", None)
        if callable(resource_type):
            resource_type = resource_type()
        return isinstance(resource_type, str) and resource_type.lower() in self.resource_types
    
    def _on_request_started(self, request: Any) -> None:
        if self.is_tracked(request):
            self._counter.increment()
    
    def _on_request_done(self, request: Any) -> None:
        if self.is_tracked(request):
            self._counter.decrement()
    
    async def wait_for_idle(
        self,
        timeout_ms: Optional[int] = None,
        idle_window_ms: Optional[int] = None,
    ) -> None:
        """
        Wait until the page is network-idle or the deadline passes.
        
        Returns once the pending count has stayed at zero for
        ``idle_window_ms``, or once ``timeout_ms`` has elapsed, whichever
        comes first. Never raises on timeout and gives no signal telling the
        two outcomes apart.
        
        Args:
            timeout_ms: Deadline (defaults to the monitor's)
            idle_window_ms: Required idle duration (defaults to the monitor's)
        """
        timeout_ms = self.timeout_ms if timeout_ms is None else timeout_ms
        idle_window_ms = self.idle_window_ms if idle_window_ms is None else idle_window_ms
        
        start = self._now_ms()
        idle_start: Optional[float] = None
        
        while True:
            now = self._now_ms()
            
            if self._counter.is_idle:
                if idle_start is None:
                    idle_start = now
                if now - idle_start >= idle_window_ms:
                    logger.debug(f"Page idle after {now - start:.0f}ms")
                    return
            else:
                idle_start = None
            
            if now - start > timeout_ms:
                logger.debug(
                    f"Idle wait gave up after {now - start:.0f}ms "
                    f"with {self._counter.pending} pending request(s)"
                )
                return
            
            await self._sleep(self.poll_interval_ms / 1000)
    
    def _now_ms(self) -> float:
        return self._clock() * 1000
