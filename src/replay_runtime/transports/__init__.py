"""
Transports module - Non-browser request transports.
"""

from replay_runtime.transports.httpx_transport import HttpxTransport

__all__ = ["HttpxTransport"]
