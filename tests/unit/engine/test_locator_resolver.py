"""
Tests for candidate locator resolution.
"""

import asyncio

import pytest

from replay_runtime.engine.locator_resolver import LocatorResolver, ResolvedElement, resolve_candidates
from replay_runtime.exceptions import InvalidInputError, NotFoundError
from replay_runtime.interfaces.locator import ILocator, ILocatorFactory, LocatorDescriptor, LocatorKind


class MockLocator(ILocator):
    """Locator with a fixed match count and configurable wait."""
    
    def __init__(
        self,
        matches: int,
        wait_error: Exception = None,
        tracker=None,
        narrowed: bool = False,
        count_error: Exception = None,
    ):
        self.matches = matches
        self.count_error = count_error
        self.wait_error = wait_error
        self.tracker = tracker
        self.narrowed = narrowed
        self.waited_with = None
    
    async def wait_attached(self, timeout_ms: int) -> None:
        self.waited_with = timeout_ms
        if self.tracker is not None:
            self.tracker.enter()
        try:
            await asyncio.sleep(0)
            if self.wait_error is not None:
                raise self.wait_error
        finally:
            if self.tracker is not None:
                self.tracker.exit()
    
    async def count(self) -> int:
        if self.count_error is not None:
            raise self.count_error
        return self.matches
    
    def first(self) -> "MockLocator":
        return MockLocator(min(self.matches, 1), narrowed=True)
    
    async def outer_html(self) -> str:
        return "<div></div>"


class ConcurrencyTracker:
    def __init__(self):
        self.active = 0
        self.peak = 0
    
    def enter(self):
        self.active += 1
        self.peak = max(self.peak, self.active)
    
    def exit(self):
        self.active -= 1


class MockFactory(ILocatorFactory):
    """Factory mapping descriptor values to match counts."""
    
    def __init__(self, counts, failing=(), tracker=None, broken=()):
        self.counts = counts
        self.failing = set(failing)
        self.broken = set(broken)
        self.tracker = tracker
        self.created = []
    
    def create(self, descriptor: LocatorDescriptor) -> MockLocator:
        error = TimeoutError("not attached") if descriptor.value in self.failing else None
        locator = MockLocator(
            self.counts.get(descriptor.value, 0),
            wait_error=error,
            tracker=self.tracker,
            count_error=ValueError("Unexpected token") if descriptor.value in self.broken else None,
        )
        self.created.append((descriptor, locator))
        return locator


def css(value):
    return LocatorDescriptor.css(value)


class TestLocatorDescriptor:
    """Test descriptor construction and validation."""
    
    def test_from_dict(self):
        descriptor = LocatorDescriptor.model_validate({
            "kind": "role",
            "value": "button",
            "options": {"name": "Save"},
        })
        assert descriptor.kind == LocatorKind.ROLE
        assert descriptor.options == {"name": "Save"}
    
    def test_nested_parent(self):
        descriptor = LocatorDescriptor.model_validate({
            "kind": "text",
            "value": "Delete",
            "parent": {"kind": "css", "value": "tr.row"},
        })
        assert descriptor.parent.kind == LocatorKind.CSS
        assert descriptor.describe() == "css('tr.row') >> text('Delete')"
    
    def test_rejects_empty_value(self):
        with pytest.raises(ValueError):
            LocatorDescriptor(kind=LocatorKind.CSS, value="")
    
    def test_rejects_unknown_kind(self):
        with pytest.raises(ValueError):
            LocatorDescriptor.model_validate({"kind": "javascript", "value": "page.locator('x')"})
    
    def test_describe_with_options(self):
        assert LocatorDescriptor.role("button", name="Save").describe() == "role('button', name='Save')"


class TestLocatorResolver:
    """Test the resolution rules."""
    
    @pytest.mark.asyncio
    async def test_first_unique_match_wins(self):
        factory = MockFactory({"#a": 3, "#b": 1, "#c": 1})
        resolver = LocatorResolver(factory)
        
        resolved = await resolver.resolve([css("#a"), css("#b"), css("#c")])
        
        assert resolved.index == 1
        assert resolved.match_count == 1
        assert resolved.is_exact
        assert resolved.descriptor.value == "#b"
        assert resolved.handle is factory.created[1][1]
    
    @pytest.mark.asyncio
    async def test_fewest_matches_fallback(self):
        factory = MockFactory({"#a": 5, "#b": 2, "#c": 0})
        resolver = LocatorResolver(factory)
        
        resolved = await resolver.resolve([css("#a"), css("#b"), css("#c")])
        
        assert resolved.index == 1
        assert resolved.match_count == 2
        assert not resolved.is_exact
        assert resolved.handle.narrowed
    
    @pytest.mark.asyncio
    async def test_tie_goes_to_earliest(self):
        factory = MockFactory({"#a": 2, "#b": 2})
        resolved = await LocatorResolver(factory).resolve([css("#a"), css("#b")])
        assert resolved.index == 0
    
    @pytest.mark.asyncio
    async def test_no_match_raises_not_found(self):
        factory = MockFactory({})
        resolver = LocatorResolver(factory)
        
        with pytest.raises(NotFoundError) as exc_info:
            await resolver.resolve([css("#a"), css("#b")])
        
        assert exc_info.value.candidates == ["css('#a')", "css('#b')"]
    
    @pytest.mark.asyncio
    async def test_failed_waits_are_ignored(self):
        """A candidate whose wait fails is still counted."""
        factory = MockFactory({"#a": 0, "#b": 1}, failing={"#a", "#b"})
        resolved = await LocatorResolver(factory).resolve([css("#a"), css("#b")])
        assert resolved.index == 1
    
    @pytest.mark.asyncio
    async def test_uncountable_candidate_is_skipped(self):
        """A candidate whose count raises does not stop later candidates."""
        factory = MockFactory({"#b": 1}, broken={"div[[bad"})
        resolved = await LocatorResolver(factory).resolve([css("div[[bad"), css("#b")])
        assert resolved.index == 1
        assert resolved.is_exact
    
    @pytest.mark.asyncio
    async def test_all_uncountable_raises_not_found(self):
        factory = MockFactory({}, broken={"div[[bad", "p[[bad"})
        with pytest.raises(NotFoundError):
            await LocatorResolver(factory).resolve([css("div[[bad"), css("p[[bad")])
    
    @pytest.mark.asyncio
    async def test_waits_run_concurrently(self):
        tracker = ConcurrencyTracker()
        factory = MockFactory({"#a": 0, "#b": 0, "#c": 1}, tracker=tracker)
        
        await LocatorResolver(factory).resolve([css("#a"), css("#b"), css("#c")])
        
        assert tracker.peak == 3
    
    @pytest.mark.asyncio
    async def test_wait_timeout_passed_through(self):
        factory = MockFactory({"#a": 1})
        await LocatorResolver(factory, wait_timeout_ms=1234).resolve([css("#a")])
        assert factory.created[0][1].waited_with == 1234
    
    @pytest.mark.asyncio
    async def test_accepts_dict_candidates(self):
        factory = MockFactory({"#a": 1})
        resolved = await LocatorResolver(factory).resolve([{"kind": "css", "value": "#a"}])
        assert isinstance(resolved, ResolvedElement)
        assert resolved.descriptor == css("#a")
    
    @pytest.mark.asyncio
    async def test_empty_list_is_invalid(self):
        with pytest.raises(InvalidInputError):
            await LocatorResolver(MockFactory({})).resolve([])
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("candidates", [None, "css=#a", {"kind": "css", "value": "#a"}])
    async def test_non_list_is_invalid(self, candidates):
        with pytest.raises(InvalidInputError):
            await LocatorResolver(MockFactory({})).resolve(candidates)
    
    @pytest.mark.asyncio
    async def test_malformed_candidate_is_invalid(self):
        factory = MockFactory({"#a": 1})
        with pytest.raises(InvalidInputError):
            await LocatorResolver(factory).resolve([{"kind": "css"}])
        with pytest.raises(InvalidInputError):
            await LocatorResolver(factory).resolve(["#a"])
        assert factory.created == []
    
    @pytest.mark.asyncio
    async def test_resolve_candidates_helper(self):
        factory = MockFactory({"#a": 1})
        resolved = await resolve_candidates(factory, [css("#a")], wait_timeout_ms=10)
        assert resolved.index == 0
        assert factory.created[0][1].waited_with == 10
