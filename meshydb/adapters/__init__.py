"""
Adapters - Implementations of ports.

- OAuthTokenService: OAuth2 password/refresh-token grants (httpx)
- HttpRequestService: JSON REST requests with bearer auth (httpx)
"""

from meshydb.adapters.token_service import OAuthTokenService
from meshydb.adapters.request_service import HttpRequestService

__all__ = [
    "OAuthTokenService",
    "HttpRequestService",
]
