"""
OAuth Token Adapter - Implements TokenPort with OAuth2 grants over httpx.

Tokens are kept in memory, keyed by an opaque authentication id.
Nothing is persisted; the refresh token is handed to callers instead.
"""

import asyncio
import logging
import uuid
from typing import Any, Dict, Optional

import httpx

from meshydb.adapters.request_service import decode_response, error_for_response
from meshydb.domain.constants import Constants
from meshydb.domain.token import TokenRecord
from meshydb.errors import AuthenticationError, TransportError
from meshydb.ports.token_port import TokenPort

logger = logging.getLogger(__name__)

SCOPE = "meshy.api offline_access"


class OAuthTokenService(TokenPort):
    """
    OAuth2 token service.

    Supports the password grant and the refresh-token grant. There is no
    background refresh: an expired token surfaces as AuthenticationError
    and callers sign in again or redeem their persistence token.
    """

    def __init__(self, constants: Constants, http_client: httpx.AsyncClient):
        """
        Initialize token service.

        Args:
            constants: Client configuration (auth URL, public key)
            http_client: Shared async HTTP client
        """
        self._constants = constants
        self._http = http_client
        self._tokens: Dict[str, TokenRecord] = {}
        self._lock = asyncio.Lock()

    async def generate_access_token(self, username: str, password: str) -> str:
        """Exchange credentials for an access token (password grant)."""
        logger.info("Requesting access token for %s", username)
        return await self._grant({
            "grant_type": "password",
            "username": username,
            "password": password,
        })

    async def generate_access_token_with_refresh_token(self, refresh_token: str) -> str:
        """Exchange a persistence token for a fresh access token."""
        logger.info("Requesting access token with persistence token")
        return await self._grant({
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        })

    async def _grant(self, form: Dict[str, str]) -> str:
        form = {"client_id": self._constants.public_key, "scope": SCOPE, **form}
        url = self._constants.token_url

        try:
            response = await self._http.post(url, data=form, headers={"Accept": "application/json"})
        except httpx.RequestError as exc:
            raise TransportError(f"Token request failed: {exc}", path=url) from exc

        # OAuth2 servers answer a rejected grant with 400 invalid_grant
        if response.status_code in (400, 401):
            error = error_for_response(response, url)
            raise AuthenticationError(
                error.message,
                status_code=response.status_code,
                detail=error.detail,
                path=url,
            )

        record = TokenRecord.from_response(decode_response(response, url))
        auth_id = str(uuid.uuid4())

        async with self._lock:
            self._tokens[auth_id] = record

        logger.debug("Cached token for auth id %s (expires %s)", auth_id, record.expires_at)
        return auth_id

    def _record(self, auth_id: str) -> TokenRecord:
        record = self._tokens.get(auth_id)
        if record is None:
            raise AuthenticationError("Not authenticated", status_code=401)
        return record

    def _live_record(self, auth_id: str) -> TokenRecord:
        record = self._record(auth_id)
        if record.is_expired():
            raise AuthenticationError("Access token has expired", status_code=401)
        return record

    async def get_access_token(self, auth_id: str) -> str:
        """Get the cached bearer token; fails if signed out or expired."""
        return self._live_record(auth_id).access_token

    async def get_authorization(self, auth_id: str) -> str:
        return self._live_record(auth_id).authorization

    def get_refresh_token(self, auth_id: str) -> Optional[str]:
        record = self._tokens.get(auth_id)
        return record.refresh_token if record else None

    def is_authenticated(self, auth_id: str) -> bool:
        record = self._tokens.get(auth_id)
        return record is not None and not record.is_expired()

    async def get_user_info(self, auth_id: str) -> Dict[str, Any]:
        """Get identity claims from the userinfo endpoint."""
        authorization = await self.get_authorization(auth_id)
        url = self._constants.userinfo_url

        try:
            response = await self._http.get(
                url,
                headers={"Authorization": authorization, "Accept": "application/json"},
            )
        except httpx.RequestError as exc:
            raise TransportError(f"Userinfo request failed: {exc}", path=url) from exc

        return decode_response(response, url) or {}

    async def sign_out(self, auth_id: str) -> None:
        """
        Discard the cached tokens and revoke the persistence token.

        The tokens are dropped locally even when revocation fails; the
        revocation error is still raised.
        """
        async with self._lock:
            record = self._tokens.pop(auth_id, None)

        if record is None or not record.refresh_token:
            return

        url = self._constants.revocation_url
        form = {
            "client_id": self._constants.public_key,
            "token": record.refresh_token,
            "token_type_hint": "refresh_token",
        }

        try:
            response = await self._http.post(url, data=form)
        except httpx.RequestError as exc:
            logger.warning("Persistence token revocation failed: %s", exc)
            raise TransportError(f"Revocation request failed: {exc}", path=url) from exc

        if not response.is_success:
            logger.warning("Persistence token revocation rejected (%s)", response.status_code)
            raise error_for_response(response, url)

        logger.info("Signed out auth id %s", auth_id)
