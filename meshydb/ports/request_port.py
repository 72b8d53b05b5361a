"""
Request Port - Interface for authenticated JSON calls to the API.

Implementations:
- HttpRequestService: httpx-backed JSON REST transport
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class RequestPort(ABC):
    """Port: Send one JSON request and return the decoded response."""

    @abstractmethod
    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
        auth_id: Optional[str] = None,
    ) -> Any:
        """
        Send a request relative to the API base URL.

        Args:
            method: HTTP verb
            path: Path relative to the API base URL
            body: JSON-serializable request body
            params: Query parameters (None values are dropped)
            auth_id: Authentication id whose bearer token is attached

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            ClientError: On 4xx responses
            ServerError: On 5xx responses or transport failures
        """
        pass

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None, auth_id: Optional[str] = None) -> Any:
        return await self.request("GET", path, params=params, auth_id=auth_id)

    async def post(self, path: str, body: Any = None, auth_id: Optional[str] = None) -> Any:
        return await self.request("POST", path, body=body, auth_id=auth_id)

    async def put(self, path: str, body: Any = None, auth_id: Optional[str] = None) -> Any:
        return await self.request("PUT", path, body=body, auth_id=auth_id)

    async def delete(self, path: str, params: Optional[Dict[str, Any]] = None, auth_id: Optional[str] = None) -> Any:
        return await self.request("DELETE", path, params=params, auth_id=auth_id)
