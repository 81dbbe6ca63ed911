"""
Network-related exceptions.
"""

from replay_runtime.exceptions.base import ReplayRuntimeError


class NetworkError(ReplayRuntimeError):
    """
    Transport-level failure while sending a request.
    
    Raised for DNS, connection and transport timeout failures. HTTP error
    statuses are ordinary responses and never raise this.
    """
    
    def __init__(self, message: str, url: str | None = None, method: str | None = None):
        super().__init__(message, {"url": url, "method": method})
        self.url = url
        self.method = method
