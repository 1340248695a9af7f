"""
Bearer token verification against the external identity provider.

The OAuth authorization flow itself happens at the identity provider; this
gateway only verifies the resulting access token by asking the provider's
user endpoint who it belongs to. Never log tokens.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

import httpx

from common.logging import get_logger
from tool_server.context import UserIdentity

logger = get_logger(__name__)


class AuthenticationError(Exception):
    """The presented credentials could not be verified."""


class IdentityProvider(ABC):
    """Resolves an access token to the user it was issued for."""

    @abstractmethod
    async def resolve_user(self, token: str) -> UserIdentity:
        """
        Verify a bearer token.

        Raises:
            AuthenticationError: If the token is invalid or the user is not allowed
        """
        pass

    async def aclose(self) -> None:
        """Release any held connections."""


class GitHubIdentityProvider(IdentityProvider):
    """Verifies GitHub OAuth access tokens via the authenticated-user endpoint."""

    def __init__(
        self,
        user_api_url: str = "https://api.github.com/user",
        allowed_logins: Optional[Iterable[str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the provider.

        Args:
            user_api_url: Endpoint returning the token owner's profile
            allowed_logins: Logins allowed through; empty or None allows any user
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.user_api_url = user_api_url
        self.allowed_logins = {login.lower() for login in (allowed_logins or [])}
        self._http = httpx.AsyncClient(transport=transport) if transport else httpx.AsyncClient()

    async def resolve_user(self, token: str) -> UserIdentity:
        try:
            response = await self._http.get(
                self.user_api_url,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept": "application/vnd.github+json",
                },
            )
        except httpx.HTTPError as e:
            logger.warning(event="identity_provider_unreachable", error_type=type(e).__name__)
            raise AuthenticationError("Identity provider is unreachable") from e

        if response.status_code != 200:
            logger.info(event="token_rejected", status_code=response.status_code)
            raise AuthenticationError("Invalid or expired access token")

        try:
            profile = response.json()
        except ValueError as e:
            raise AuthenticationError("Identity provider returned an invalid profile") from e

        login = profile.get("login") if isinstance(profile, dict) else None
        if not login:
            raise AuthenticationError("Identity provider returned an invalid profile")

        if self.allowed_logins and login.lower() not in self.allowed_logins:
            logger.info(event="user_not_allowed", user_login=login)
            raise AuthenticationError(f"User '{login}' is not allowed to use this server")

        return UserIdentity(login=login, name=profile.get("name"), email=profile.get("email"))

    async def aclose(self) -> None:
        await self._http.aclose()
