"""
Ports - Abstract interfaces.

Services depend on these, never on the httpx adapters directly.
"""

from meshydb.ports.token_port import TokenPort
from meshydb.ports.request_port import RequestPort

__all__ = [
    "TokenPort",
    "RequestPort",
]
