"""
Locator-related exceptions.
"""

from typing import List, Optional

from replay_runtime.exceptions.base import ReplayRuntimeError


class NotFoundError(ReplayRuntimeError):
    """
    No candidate locator matched any element.
    
    Step-fatal: the current step aborts and the error bubbles to the
    script runner.
    """
    
    def __init__(self, message: str, candidates: Optional[List[str]] = None):
        super().__init__(message, {"candidates": candidates} if candidates else None)
        self.candidates = candidates or []
