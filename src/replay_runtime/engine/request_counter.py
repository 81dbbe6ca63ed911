"""
Request Counter - Pending network request bookkeeping.
"""


class RequestCounter:
    """
    Count of in-flight requests of interest.
    
    Mutated only by network-event callbacks and read by the idle poll loop,
    both on the same event loop. The count never goes below zero, even when
    more "finished" events arrive than "started" ones (e.g. after attaching
    to a page mid-request).
    """
    
    def __init__(self) -> None:
        self._pending = 0
    
    @property
    def pending(self) -> int:
        """Current number of pending requests."""
        return self._pending
    
    @property
    def is_idle(self) -> bool:
        return self._pending == 0
    
    def increment(self) -> int:
        """Record a started request."""
        self._pending += 1
        return self._pending
    
    def decrement(self) -> int:
        """Record a finished or failed request (floored at zero)."""
        self._pending = max(0, self._pending - 1)
        return self._pending
    
    def reset(self) -> None:
        self._pending = 0
    
    def __repr__(self) -> str:
        return f"RequestCounter(pending={self._pending})"
