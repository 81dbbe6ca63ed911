"""
Base exceptions for the replay runtime.
"""


class ReplayRuntimeError(Exception):
    """
    Base exception for all replay runtime errors.
    
    Every error raised by a recorded step derives from this class, so a
    script's top-level runner can catch them in one place.
    
    Attributes:
        message: Human-readable error message
        details: Optional additional error details
    """
    
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(ReplayRuntimeError):
    """
    Error in configuration.
    
    Raised when there's an issue with settings, environment variables,
    or configuration files.
    """
    pass


class InvalidInputError(ReplayRuntimeError):
    """
    Malformed arguments handed to a runtime operation.
    
    Signals a broken recording or a programming error rather than a
    runtime flake. Never retried.
    """
    
    def __init__(self, message: str, argument: str | None = None):
        super().__init__(message, {"argument": argument} if argument else None)
        self.argument = argument
