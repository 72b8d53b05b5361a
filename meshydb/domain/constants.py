"""
Constants - Per-client configuration (account, public key, tenant, endpoints).
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from meshydb.errors import require

DEFAULT_TENANT = "default"
API_URL_TEMPLATE = "https://api.meshydb.com/{account}/{tenant}"
AUTH_URL_TEMPLATE = "https://auth.meshydb.com/{account}/{tenant}"


@dataclass(frozen=True)
class Constants:
    """
    Immutable client configuration.

    Domain rules:
    - account_name and public_key are required
    - tenant falls back to the default tenant
    - api_url/auth_url are derived once and never change
    """
    account_name: str
    public_key: str
    tenant: str = DEFAULT_TENANT
    api_url: str = ""
    auth_url: str = ""

    def __init__(
        self,
        account_name: str,
        public_key: str,
        tenant: Optional[str] = None,
        api_url: Optional[str] = None,
        auth_url: Optional[str] = None,
    ):
        require(account_name, "account_name")
        require(public_key, "public_key")

        tenant = tenant or DEFAULT_TENANT
        api_url = api_url or API_URL_TEMPLATE.format(account=account_name, tenant=tenant)
        auth_url = auth_url or AUTH_URL_TEMPLATE.format(account=account_name, tenant=tenant)

        object.__setattr__(self, "account_name", account_name)
        object.__setattr__(self, "public_key", public_key)
        object.__setattr__(self, "tenant", tenant)
        object.__setattr__(self, "api_url", api_url.rstrip("/"))
        object.__setattr__(self, "auth_url", auth_url.rstrip("/"))

    @property
    def token_url(self) -> str:
        return f"{self.auth_url}/connect/token"

    @property
    def revocation_url(self) -> str:
        return f"{self.auth_url}/connect/revocation"

    @property
    def userinfo_url(self) -> str:
        return f"{self.auth_url}/connect/userinfo"

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        prefix: str = "MESHYDB_",
    ) -> "Constants":
        """
        Build constants from environment variables.

        Reads {prefix}ACCOUNT_NAME, {prefix}PUBLIC_KEY and the optional
        {prefix}TENANT, {prefix}API_URL, {prefix}AUTH_URL.

        Args:
            environ: Mapping to read from (default os.environ)
            prefix: Variable name prefix (default MESHYDB_)

        Returns:
            Constants instance

        Raises:
            ValidationError: If account name or public key is missing
        """
        env = os.environ if environ is None else environ
        return cls(
            account_name=env.get(f"{prefix}ACCOUNT_NAME", ""),
            public_key=env.get(f"{prefix}PUBLIC_KEY", ""),
            tenant=env.get(f"{prefix}TENANT"),
            api_url=env.get(f"{prefix}API_URL"),
            auth_url=env.get(f"{prefix}AUTH_URL"),
        )
