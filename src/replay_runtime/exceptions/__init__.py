"""
Exceptions module - Custom exception hierarchy.

This module defines all custom exceptions raised by the replay runtime,
providing clear error types for different failure scenarios.
"""

from replay_runtime.exceptions.base import (
    ReplayRuntimeError,
    ConfigurationError,
    InvalidInputError,
)
from replay_runtime.exceptions.locator import NotFoundError
from replay_runtime.exceptions.network import NetworkError

__all__ = [
    # Base exceptions
    "ReplayRuntimeError",
    "ConfigurationError",
    "InvalidInputError",
    # Step exceptions
    "NotFoundError",
    "NetworkError",
]
