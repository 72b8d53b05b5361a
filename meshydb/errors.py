"""
Client Errors - Exception taxonomy for the MeshyDB client.

Callers branch on the error kind:
- ValidationError: bad arguments, raised before any network call
- AuthenticationError: re-prompt for credentials or re-authenticate
- ClientError (and subclasses): request rejected by the server (4xx)
- ServerError / TransportError: terminal failure, report it
"""

from typing import Any, Optional


class MeshyError(Exception):
    """Base class for every error raised by this client."""


class ValidationError(MeshyError, ValueError):
    """Missing or invalid argument, detected client-side."""


class ClientError(MeshyError):
    """
    Request rejected by the server with a 4xx status.

    Attributes:
        status_code: HTTP status returned by the server
        message: Server-provided message (or a generic one)
        detail: Raw error payload, when the server sent one
        path: Request path that failed
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        detail: Any = None,
        path: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail
        self.path = path

    def __str__(self) -> str:
        return f"{self.status_code}: {self.message}"


class AuthenticationError(ClientError):
    """Credentials rejected, or the access token is missing/expired/revoked."""

    def __init__(
        self,
        message: str,
        status_code: int = 401,
        detail: Any = None,
        path: Optional[str] = None,
    ):
        super().__init__(message, status_code, detail, path)


class NotFoundError(ClientError):
    """Requested resource does not exist (404)."""


class ConflictError(ClientError):
    """Request conflicts with server state (409)."""


class VerificationError(ClientError):
    """Verification hash/code pair rejected or expired."""


class ServerError(MeshyError):
    """Server failed to handle the request (5xx)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: Any = None,
        path: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail
        self.path = path


class TransportError(ServerError):
    """Request never produced a response (connection, DNS, TLS failure)."""


def require(value: Any, name: str, kind: str = "parameter") -> None:
    """
    Raise ValidationError if a required value is empty.

    Args:
        value: Value to check
        name: Name reported in the error
        kind: "parameter" or "field"
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Missing required {kind}: {name}")
