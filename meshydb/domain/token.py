"""
Token Domain Model - Access/refresh token pair held by the token service.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt


@dataclass
class TokenRecord:
    """
    Token record - the credentials behind one authentication id.

    Domain rules:
    - Only replaced by a successful token grant
    - refresh_token is the persistence token handed to callers
    - expires_at is None when the server gives no lifetime and the
      access token is not a JWT
    """
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    token_type: str = "Bearer"

    @classmethod
    def from_response(cls, data: Dict[str, Any], now: Optional[datetime] = None) -> "TokenRecord":
        """
        Build a record from an OAuth2 token endpoint response.

        Args:
            data: Token response body
            now: Reference time (default current UTC time)

        Returns:
            New token record
        """
        now = now or datetime.now(timezone.utc)
        access_token = data["access_token"]

        expires_at = None
        if data.get("expires_in") is not None:
            expires_at = now + timedelta(seconds=int(data["expires_in"]))
        else:
            expires_at = cls._jwt_expiry(access_token)

        return cls(
            access_token=access_token,
            refresh_token=data.get("refresh_token"),
            expires_at=expires_at,
            token_type=data.get("token_type", "Bearer"),
        )

    @staticmethod
    def _jwt_expiry(access_token: str) -> Optional[datetime]:
        """Read the exp claim without verifying the signature."""
        try:
            claims = jwt.decode(access_token, options={"verify_signature": False})
        except jwt.InvalidTokenError:
            return None

        exp = claims.get("exp")
        if exp is None:
            return None
        return datetime.fromtimestamp(int(exp), tz=timezone.utc)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the access token is past its expiry."""
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    @property
    def authorization(self) -> str:
        """Authorization header value, using the scheme the server issued."""
        return f"{self.token_type or 'Bearer'} {self.access_token}"
