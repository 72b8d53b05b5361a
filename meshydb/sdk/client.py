"""
MeshyDB Client - High-level SDK entry points.

Wires constants, token service, request service and the CRUD services
together and hands back connections bound to one authentication.
"""

import logging
import uuid
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Set

import httpx

from meshydb.adapters.request_service import HttpRequestService
from meshydb.adapters.token_service import OAuthTokenService
from meshydb.domain.constants import Constants
from meshydb.domain.user import (
    AnonymousRegistration,
    RegisterUser,
    ResetPassword,
    User,
    UserVerificationCheck,
    UserVerificationHash,
)
from meshydb.errors import ConflictError, MeshyError, require
from meshydb.services.meshes_service import MeshesService
from meshydb.services.users_service import UsersService

logger = logging.getLogger(__name__)

ANONYMOUS_PASSWORD = "nopassword"

_current_connection: Optional["MeshyConnection"] = None


class ClientState(Enum):
    """Client lifecycle states."""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    CONNECTED = "connected"


def current_connection() -> Optional["MeshyConnection"]:
    """Get the most recently established connection, if still signed in."""
    return _current_connection


class MeshyClient:
    """
    Client for one account/tenant.

    Example:
        from meshydb import initialize

        async with initialize("my-account", "public-key") as client:
            connection = await client.login("alice", "s3cret")
            me = await connection.users_service.get_self()
            await connection.signout()

    Concurrent logins on one client each get their own authentication id,
    so they don't overwrite each other's tokens. current_connection()
    reports whichever finished last.
    """

    def __init__(
        self,
        account_name: str,
        public_key: str,
        tenant: Optional[str] = None,
        api_url: Optional[str] = None,
        auth_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        constants: Optional[Constants] = None,
    ):
        """
        Initialize client.

        Args:
            account_name: MeshyDB account name
            public_key: Public key of the tenant
            tenant: Tenant name (default tenant if omitted)
            api_url: Override for the API base URL
            auth_url: Override for the auth server URL
            http_client: Existing httpx.AsyncClient to send requests with
            constants: Prebuilt constants (e.g. Constants.from_env()); takes
                precedence over the individual settings
        """
        self.constants = constants or Constants(account_name, public_key, tenant, api_url, auth_url)

        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient()
        self._tokens = OAuthTokenService(self.constants, self._http)
        self._requests = HttpRequestService(self.constants, self._tokens, self._http)
        self._users = UsersService(self._requests)

        self._state = ClientState.UNAUTHENTICATED
        self._active: Set[str] = set()

    @classmethod
    def from_env(cls, http_client: Optional[httpx.AsyncClient] = None) -> "MeshyClient":
        """Build a client from MESHYDB_* environment variables."""
        constants = Constants.from_env()
        return cls(constants.account_name, constants.public_key, http_client=http_client, constants=constants)

    @property
    def state(self) -> ClientState:
        return self._state

    def _settle_state(self) -> None:
        self._state = ClientState.CONNECTED if self._active else ClientState.UNAUTHENTICATED

    # Authentication

    def login(self, username: str, password: str) -> Awaitable["MeshyConnection"]:
        """
        Sign in with username and password.

        Raises:
            ValidationError: If username or password is empty (at call time)
            AuthenticationError: If the credentials are rejected
        """
        require(username, "username")
        require(password, "password")
        return self._connect(lambda: self._tokens.generate_access_token(username, password))

    def login_with_persistence(self, persistence_token: str) -> Awaitable["MeshyConnection"]:
        """
        Sign in with a persistence token from an earlier connection.

        Raises:
            ValidationError: If the token is empty (at call time)
            AuthenticationError: If the token is expired or revoked
        """
        require(persistence_token, "persistence_token")
        return self._connect(
            lambda: self._tokens.generate_access_token_with_refresh_token(persistence_token)
        )

    async def login_anonymously(self, username: Optional[str] = None) -> "MeshyConnection":
        """
        Sign in as a throwaway anonymous user.

        Two steps: ensure the anonymous identity exists, then authenticate
        as it. A failure is logged against the step that raised it.

        Args:
            username: Username for the identity (random uuid if omitted)
        """
        username = username or str(uuid.uuid4())
        await self.ensure_anonymous_identity(username)
        try:
            return await self._connect(
                lambda: self._tokens.generate_access_token(username, ANONYMOUS_PASSWORD)
            )
        except MeshyError:
            logger.warning("Anonymous sign-in failed at authentication for %s", username)
            raise

    async def ensure_anonymous_identity(self, username: str) -> Optional[User]:
        """
        Register the anonymous identity used by login_anonymously().

        Returns:
            The new user, or None if the identity was registered earlier
        """
        registration = AnonymousRegistration(username=username, new_password=ANONYMOUS_PASSWORD)
        try:
            return await self._users.create_anonymous_user(registration)
        except ConflictError:
            logger.debug("Anonymous identity %s already exists", username)
            return None
        except MeshyError:
            logger.warning("Anonymous sign-in failed at registration for %s", username)
            raise

    async def _connect(self, authenticate: Callable[[], Awaitable[str]]) -> "MeshyConnection":
        global _current_connection

        self._state = ClientState.AUTHENTICATING
        auth_id = None
        try:
            auth_id = await authenticate()
        finally:
            if auth_id is None:
                self._settle_state()

        self._active.add(auth_id)
        self._state = ClientState.CONNECTED

        connection = MeshyConnection(self, auth_id)
        _current_connection = connection
        logger.info("Connected to %s/%s", self.constants.account_name, self.constants.tenant)
        return connection

    async def _sign_out(self, connection: "MeshyConnection") -> None:
        global _current_connection

        try:
            await self._tokens.sign_out(connection.auth_id)
        finally:
            self._active.discard(connection.auth_id)
            self._settle_state()
            if _current_connection is connection:
                _current_connection = None

    # Anonymous user operations

    def register_user(self, user: RegisterUser) -> Awaitable[UserVerificationHash]:
        """Register a user; returns the hash for verifying the registration."""
        return self._users.create_user(user)

    def forgot_password(self, username: str, attempt: int = 1) -> Awaitable[UserVerificationHash]:
        """Request a password reset hash for a user."""
        return self._users.forgot_password(username, attempt)

    def reset_password(self, reset: ResetPassword) -> Awaitable[None]:
        """Reset a password using the verification hash and code."""
        return self._users.reset_password(reset)

    def check_hash(self, check: UserVerificationCheck) -> Awaitable[bool]:
        return self._users.check_hash(check)

    def verify_user(self, check: UserVerificationCheck) -> Awaitable[None]:
        return self._users.verify_user(check)

    # Lifecycle

    async def close(self) -> None:
        """Close the HTTP client (only if this client created it)."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "MeshyClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()


class MeshyConnection:
    """
    Connection for one signed-in user.

    Exposes the users and meshes services bound to its token.
    """

    def __init__(self, client: MeshyClient, auth_id: str):
        self._client = client
        self.auth_id = auth_id
        self.users_service = UsersService(client._requests, auth_id)
        self.meshes_service = MeshesService(client._requests, auth_id)

    @property
    def is_connected(self) -> bool:
        return self._client._tokens.is_authenticated(self.auth_id)

    def update_password(self, previous_password: str, new_password: str) -> Awaitable[None]:
        """Change the signed-in user's password."""
        return self.users_service.update_password(previous_password, new_password)

    async def signout(self) -> None:
        """Sign out: revoke the persistence token and drop cached tokens."""
        await self._client._sign_out(self)

    def retrieve_persistence_token(self) -> Optional[str]:
        """Get the persistence token to store for a later login_with_persistence()."""
        return self._client._tokens.get_refresh_token(self.auth_id)

    async def get_my_user_info(self) -> Dict[str, Any]:
        """Get the identity claims of the signed-in user."""
        return await self._client._tokens.get_user_info(self.auth_id)


def initialize(account_name: str, public_key: str, **options: Any) -> MeshyClient:
    """
    Create a client for the default tenant.

    Args:
        account_name: MeshyDB account name
        public_key: Public key of the default tenant
        **options: api_url, auth_url, http_client
    """
    return MeshyClient(account_name, public_key, **options)


def initialize_with_tenant(account_name: str, tenant: str, public_key: str, **options: Any) -> MeshyClient:
    """
    Create a client for a named tenant.

    Args:
        account_name: MeshyDB account name
        tenant: Tenant name
        public_key: Public key of that tenant
        **options: api_url, auth_url, http_client
    """
    require(tenant, "tenant")
    return MeshyClient(account_name, public_key, tenant=tenant, **options)
