"""
HTTP Request Adapter - Implements RequestPort with httpx.

Builds JSON requests against the API base URL, attaches the bearer token
and maps non-2xx responses onto the client's error taxonomy.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from meshydb.domain.constants import Constants
from meshydb.errors import (
    AuthenticationError,
    ClientError,
    ConflictError,
    MeshyError,
    NotFoundError,
    ServerError,
    TransportError,
)
from meshydb.ports.request_port import RequestPort
from meshydb.ports.token_port import TokenPort

logger = logging.getLogger(__name__)

STATUS_ERRORS = {
    401: AuthenticationError,
    404: NotFoundError,
    409: ConflictError,
}

MESSAGE_KEYS = ("message", "error_description", "detail", "title", "error")


def _error_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _error_message(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        for key in MESSAGE_KEYS:
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
        return None
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    return None


def error_for_response(response: httpx.Response, path: Optional[str] = None) -> MeshyError:
    """
    Build the typed error for a non-2xx response.

    Args:
        response: Failed response
        path: Request path, recorded on the error

    Returns:
        ClientError subclass for 4xx, ServerError otherwise
    """
    status = response.status_code
    detail = _error_payload(response)
    message = _error_message(detail) or response.reason_phrase or f"HTTP {status}"

    if 400 <= status < 500:
        error_class = STATUS_ERRORS.get(status, ClientError)
        return error_class(message, status_code=status, detail=detail, path=path)
    return ServerError(message, status_code=status, detail=detail, path=path)


def decode_response(response: httpx.Response, path: Optional[str] = None) -> Any:
    """
    Decode a response body or raise its typed error.

    Returns:
        Decoded JSON, or None for 204 and empty bodies
    """
    if not response.is_success:
        raise error_for_response(response, path)

    if response.status_code == 204 or not response.content:
        return None

    try:
        return response.json()
    except ValueError as exc:
        raise ServerError(
            "Response body is not valid JSON",
            status_code=response.status_code,
            detail=response.text,
            path=path,
        ) from exc


class HttpRequestService(RequestPort):
    """
    httpx-backed request service.

    One outbound call per request: no retries, and no timeout policy
    beyond the httpx client's own default.
    """

    def __init__(
        self,
        constants: Constants,
        token_service: TokenPort,
        http_client: httpx.AsyncClient,
    ):
        """
        Initialize request service.

        Args:
            constants: Client configuration (API base URL, public key)
            token_service: Source of bearer tokens
            http_client: Shared async HTTP client
        """
        self._constants = constants
        self._tokens = token_service
        self._http = http_client

    def _url(self, path: str) -> str:
        return f"{self._constants.api_url}/{path.lstrip('/')}"

    async def _headers(self, auth_id: Optional[str]) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if auth_id:
            headers["Authorization"] = await self._tokens.get_authorization(auth_id)
        else:
            headers["client_id"] = self._constants.public_key
        return headers

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
        auth_id: Optional[str] = None,
    ) -> Any:
        """Send a request relative to the API base URL."""
        path = path.lstrip("/")
        headers = await self._headers(auth_id)
        query = {k: v for k, v in (params or {}).items() if v is not None}

        logger.debug("%s %s", method, path)
        try:
            response = await self._http.request(
                method,
                self._url(path),
                json=body,
                params=query or None,
                headers=headers,
            )
        except httpx.RequestError as exc:
            raise TransportError(f"{method} {path} failed: {exc}", path=path) from exc

        logger.debug("%s %s -> %s", method, path, response.status_code)
        return decode_response(response, path)
