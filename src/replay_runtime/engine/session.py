"""
Replay Session - Per-page runtime for one generated script.

Binds an IdleMonitor, a LocatorResolver, an HttpRequestExecutor and a
FactReconciler to one Playwright page. A generated script runs its steps in
order inside ``session.step(...)``, which waits for the page to go idle
before the step body runs.

Example:
    >>> async with ReplaySession.for_page(page) as session:
    ...     async with session.step(1, "Open the dashboard"):
    ...         await page.goto("https://app.example.com")
    ...     async with session.step(2, "Click Save"):
    ...         resolved = await session.resolve([
    ...             LocatorDescriptor.role("button", name="Save"),
    ...             LocatorDescriptor.css("form button.save"),
    ...         ])
    ...         await resolved.handle.locator.click()
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional, Sequence, Union
import logging
import time

from replay_runtime.config import Settings, get_settings
from replay_runtime.engine.fact_reconciler import FactReconciler
from replay_runtime.engine.idle_monitor import IdleMonitor
from replay_runtime.engine.locator_resolver import LocatorResolver, ResolvedElement
from replay_runtime.engine.request_executor import HttpRequestExecutor, RawResponse
from replay_runtime.engine.request_spec import RequestSpec
from replay_runtime.exceptions import ReplayRuntimeError
from replay_runtime.reporting.exporters import ResultExporter

logger = logging.getLogger(__name__)


class ReplaySession:
    """
    Runtime services for one page.
    
    Steps run strictly one after another; the only concurrency is inside a
    single operation (the resolver's candidate fan-out).
    """
    
    def __init__(
        self,
        monitor: IdleMonitor,
        resolver: LocatorResolver,
        executor: HttpRequestExecutor,
        reconciler: Optional[FactReconciler] = None,
        exporter: Optional[ResultExporter] = None,
        page: Optional[Any] = None,
    ):
        self.monitor = monitor
        self.resolver = resolver
        self.executor = executor
        self.reconciler = reconciler or FactReconciler()
        self.exporter = exporter
        self.page = page
    
    @classmethod
    def for_page(
        cls,
        page: Any,
        settings: Optional[Settings] = None,
        run_id: Optional[str] = None,
        export: bool = False,
    ) -> "ReplaySession":
        """
        Build a session wired to a Playwright page.
        
        Args:
            page: Playwright Page
            settings: Runtime settings (global settings if omitted)
            run_id: Sub-directory for exported results
            export: Write request results and step screenshots to disk
            
        Returns:
            A session whose idle monitor is already attached to the page
        """
        from replay_runtime.browsers.playwright_adapters import (
            PlaywrightLocatorFactory,
            PlaywrightRequestTransport,
            PlaywrightStorageAccessor,
        )
        
        settings = settings or get_settings()
        
        monitor = IdleMonitor.from_settings(settings.idle)
        monitor.attach(page)
        
        timeout_s = settings.request.transport_timeout_s
        transport = PlaywrightRequestTransport(
            page,
            timeout_ms=timeout_s * 1000 if timeout_s is not None else None,
        )
        
        return cls(
            monitor=monitor,
            resolver=LocatorResolver.from_settings(PlaywrightLocatorFactory(page), settings.locator),
            executor=HttpRequestExecutor(transport, storage=PlaywrightStorageAccessor(page)),
            reconciler=FactReconciler.from_settings(settings.reconcile),
            exporter=ResultExporter.from_settings(settings.export, run_id) if export else None,
            page=page,
        )
    
    async def wait_for_idle(
        self,
        timeout_ms: Optional[int] = None,
        idle_window_ms: Optional[int] = None,
    ) -> None:
        await self.monitor.wait_for_idle(timeout_ms, idle_window_ms)
    
    @asynccontextmanager
    async def step(
        self,
        number: int,
        description: str = "",
        screenshot: bool = False,
        screenshot_index: Optional[int] = None,
    ) -> AsyncIterator[None]:
        """
        Run one recorded step after the page has settled.
        
        With ``screenshot`` set, the page is captured once the step body has
        finished and the page has settled again, as
        ``<run dir>/Step_<number>[_<screenshot_index>].png``. Failed steps
        are not captured.
        
        Errors propagate unchanged; they are only logged here.
        """
        await self.wait_for_idle()
        logger.info(f"Step {number}: {description}" if description else f"Step {number}")
        start = time.time()
        try:
            yield
        except ReplayRuntimeError as e:
            logger.error(f"Step {number} failed: {e}")
            raise
        logger.debug(f"Step {number} done in {(time.time() - start) * 1000:.0f}ms")
        if screenshot:
            await self.capture_screenshot(number, screenshot_index)
    
    async def capture_screenshot(self, step_index: int, index: Optional[int] = None) -> Optional[Path]:
        """
        Wait for the page to settle, then save a screenshot of it.
        
        Needs both a page and an exporter; without them nothing is written.
        """
        if self.page is None or self.exporter is None:
            logger.warning(f"Step {step_index}: screenshot skipped, session has no page or exporter")
            return None
        await self.wait_for_idle()
        return await self.exporter.capture_screenshot(self.page, step_index, index)
    
    async def resolve(self, candidates: Sequence[Any]) -> ResolvedElement:
        return await self.resolver.resolve(candidates)
    
    async def request(
        self,
        spec: Union[RequestSpec, Dict[str, Any]],
        step_index: Optional[int] = None,
        request_index: Optional[int] = None,
    ) -> RawResponse:
        """Execute a request step, exporting the result when enabled."""
        response = await self.executor.execute(spec)
        if self.exporter is not None and step_index is not None:
            self.exporter.export_api_result(response, step_index, request_index)
        return response
    
    async def capture_fragment(self, target: Union[ResolvedElement, Sequence[Any]]) -> str:
        """
        Capture the outer HTML of an element, for use as a UI fact source.
        
        Args:
            target: A resolved element, or candidates to resolve first
        """
        resolved = target if isinstance(target, ResolvedElement) else await self.resolve(target)
        return await resolved.handle.outer_html()
    
    def verify(
        self,
        ui_fragments: Optional[Sequence[Any]],
        db_row_sets: Optional[Sequence[Any]],
        api_payloads: Optional[Sequence[Any]],
    ) -> bool:
        return self.reconciler.verify(ui_fragments, db_row_sets, api_payloads)
    
    def close(self) -> None:
        """Stop listening to the page's network events."""
        self.monitor.detach()
    
    async def __aenter__(self) -> "ReplaySession":
        return self
    
    async def __aexit__(self, *exc: Any) -> None:
        self.close()
