"""
Token Port - Interface for acquiring and holding access tokens.

Implementations:
- OAuthTokenService: OAuth2 password/refresh-token grants over HTTP
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class TokenPort(ABC):
    """Port: Exchange credentials for tokens and hand out bearer tokens."""

    @abstractmethod
    async def generate_access_token(self, username: str, password: str) -> str:
        """
        Exchange credentials for an access token (password grant).

        Args:
            username: Username to authenticate
            password: User's password

        Returns:
            Opaque authentication id for the cached token pair

        Raises:
            AuthenticationError: If the credentials are rejected
        """
        pass

    @abstractmethod
    async def generate_access_token_with_refresh_token(self, refresh_token: str) -> str:
        """
        Exchange a persistence (refresh) token for a fresh access token.

        Args:
            refresh_token: Long-lived token from an earlier login

        Returns:
            Opaque authentication id for the cached token pair

        Raises:
            AuthenticationError: If the token is expired or revoked
        """
        pass

    @abstractmethod
    async def get_access_token(self, auth_id: str) -> str:
        """
        Get the bearer token for an authentication id.

        Raises:
            AuthenticationError: If signed out or the token has expired
        """
        pass

    @abstractmethod
    async def get_authorization(self, auth_id: str) -> str:
        """
        Get the Authorization header value for an authentication id.

        Raises:
            AuthenticationError: If signed out or the token has expired
        """
        pass

    @abstractmethod
    def get_refresh_token(self, auth_id: str) -> Optional[str]:
        """Get the persistence token, or None if there isn't one."""
        pass

    @abstractmethod
    async def get_user_info(self, auth_id: str) -> Dict[str, Any]:
        """Get the identity claims of the signed-in user."""
        pass

    @abstractmethod
    async def sign_out(self, auth_id: str) -> None:
        """Revoke the persistence token and discard the cached tokens."""
        pass
