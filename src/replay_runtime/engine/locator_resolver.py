"""
Locator Resolver - Ranked candidate locators to one live element.

A recorded step stores several candidate locators for its target, in the
order the recorder produced them. At replay time selectors drift: attributes
change, lists re-render, generated class names rotate. The resolver tolerates
that drift:

1. Build a lazy locator for every candidate (order preserved)
2. Wait for all candidates together, each up to a bounded timeout, for a
   first attached match; individual failures are ignored
3. Count matches per candidate, in priority order; a candidate whose count
   fails is skipped like one with no matches
4. The first candidate with exactly one match wins
5. Otherwise the candidate with the fewest (nonzero) matches wins, earliest
   first on ties, narrowed to its first match
6. No candidate matched anything: NotFoundError
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, TYPE_CHECKING

from pydantic import ValidationError

from replay_runtime.exceptions import InvalidInputError, NotFoundError
from replay_runtime.interfaces.locator import ILocator, ILocatorFactory, LocatorDescriptor

if TYPE_CHECKING:
    from replay_runtime.config.settings import LocatorSettings

logger = logging.getLogger(__name__)


@dataclass
class ResolvedElement:
    """
    The element chosen for a step.
    
    Attributes:
        handle: Live locator for the chosen element
        match_count: Matches the winning candidate had when counted
        index: Position of the winning candidate in the input list
        descriptor: The winning candidate
    """
    handle: ILocator
    match_count: int
    index: int
    descriptor: LocatorDescriptor
    
    @property
    def is_exact(self) -> bool:
        """True when the winning candidate matched exactly one element."""
        return self.match_count == 1


class LocatorResolver:
    """
    Resolve a ranked list of candidate locators to exactly one element.
    
    Example:
        >>> resolver = LocatorResolver(PlaywrightLocatorFactory(page))
        >>> resolved = await resolver.resolve([
        ...     LocatorDescriptor.role("textbox", name="Email"),
        ...     LocatorDescriptor.css("input#email"),
        ... ])
        >>> await resolved.handle.locator.fill("user@example.com")
    """
    
    def __init__(self, factory: ILocatorFactory, wait_timeout_ms: int = 3000):
        """
        Initialize the resolver.
        
        Args:
            factory: Builds live locators from descriptors
            wait_timeout_ms: Per-candidate wait for a first attached match
        """
        self._factory = factory
        self.wait_timeout_ms = wait_timeout_ms
    
    @classmethod
    def from_settings(cls, factory: ILocatorFactory, settings: "LocatorSettings") -> "LocatorResolver":
        return cls(factory, wait_timeout_ms=settings.wait_timeout_ms)
    
    async def resolve(self, candidates: Sequence[Any]) -> ResolvedElement:
        """
        Resolve candidates to one element.
        
        Args:
            candidates: LocatorDescriptor instances or their dict form,
                highest priority first
            
        Returns:
            The resolved element
            
        Raises:
            InvalidInputError: Empty or malformed candidate list
            NotFoundError: No candidate matched anything
        """
        descriptors = self._coerce(candidates)
        start_time = time.time()
        
        locators = [self._factory.create(d) for d in descriptors]
        await self._wait_all(locators)
        
        best_index = -1
        best_count = 0
        for i, locator in enumerate(locators):
            try:
                count = await locator.count()
            except Exception as e:
                # e.g. a candidate whose selector no longer parses
                logger.warning(f"Candidate {i} {descriptors[i].describe()} could not be counted: {e}")
                continue
            logger.debug(f"Candidate {i} {descriptors[i].describe()} matched {count}")
            
            if count == 1:
                elapsed = (time.time() - start_time) * 1000
                logger.info(f"Resolved with candidate {i}: {descriptors[i].describe()} ({elapsed:.0f}ms)")
                return ResolvedElement(
                    handle=locator,
                    match_count=1,
                    index=i,
                    descriptor=descriptors[i],
                )
            
            if count > 0 and (best_index == -1 or count < best_count):
                best_index = i
                best_count = count
        
        if best_index != -1:
            logger.warning(
                f"No unique match; using first of {best_count} matches for "
                f"candidate {best_index}: {descriptors[best_index].describe()}"
            )
            return ResolvedElement(
                handle=locators[best_index].first(),
                match_count=best_count,
                index=best_index,
                descriptor=descriptors[best_index],
            )
        
        described = [d.describe() for d in descriptors]
        raise NotFoundError(
            f"None of {len(descriptors)} candidate locator(s) matched an element",
            candidates=described,
        )
    
    async def _wait_all(self, locators: List[ILocator]) -> None:
        """Wait for every locator together; slow or failing waits are ignored."""
        results = await asyncio.gather(
            *(locator.wait_attached(self.wait_timeout_ms) for locator in locators),
            return_exceptions=True,
        )
        failed = sum(1 for r in results if isinstance(r, BaseException))
        if failed:
            logger.debug(f"{failed}/{len(locators)} candidate(s) never attached within {self.wait_timeout_ms}ms")
    
    @staticmethod
    def _coerce(candidates: Any) -> List[LocatorDescriptor]:
        """Validate the candidate list and convert dict entries to descriptors."""
        if not isinstance(candidates, (list, tuple)):
            raise InvalidInputError(
                f"Candidates must be a list, got {type(candidates).__name__}",
                argument="candidates",
            )
        if not candidates:
            raise InvalidInputError("Candidate list is empty", argument="candidates")
        
        descriptors: List[LocatorDescriptor] = []
        for i, candidate in enumerate(candidates):
            if isinstance(candidate, LocatorDescriptor):
                descriptors.append(candidate)
                continue
            if isinstance(candidate, dict):
                try:
                    descriptors.append(LocatorDescriptor.model_validate(candidate))
                    continue
                except ValidationError as e:
                    raise InvalidInputError(
                        f"Candidate {i} is not a valid locator descriptor: {e}",
                        argument="candidates",
                    ) from e
            raise InvalidInputError(
                f"Candidate {i} has unsupported type {type(candidate).__name__}",
                argument="candidates",
            )
        return descriptors


async def resolve_candidates(
    factory: ILocatorFactory,
    candidates: Sequence[Any],
    wait_timeout_ms: Optional[int] = None,
) -> ResolvedElement:
    """
    Convenience function for one-off resolution.
    
    Args:
        factory: Locator factory for the current page
        candidates: Candidate descriptors, highest priority first
        wait_timeout_ms: Per-candidate wait (defaults to 3000ms)
        
    Returns:
        The resolved element
    """
    resolver = LocatorResolver(factory) if wait_timeout_ms is None else LocatorResolver(factory, wait_timeout_ms)
    return await resolver.resolve(candidates)
