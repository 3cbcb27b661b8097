"""Member profile directory backed by the Auth0 Management API."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any

import httpx

from src.config.settings import Settings, settings
from src.events.errors import NotFoundError, UpstreamUnavailableError
from src.identity.dtos import Profile

logger = logging.getLogger(__name__)


class ProfileDirectory(ABC):
    @abstractmethod
    async def list_profiles(self, page: int) -> list[Profile]:
        raise NotImplementedError

    @abstractmethod
    async def list_all_profiles(self) -> list[Profile]:
        raise NotImplementedError

    @abstractmethod
    async def get_profile(self, user_id: str) -> Profile:
        """Raises NotFoundError for an unknown user."""
        raise NotImplementedError

    @abstractmethod
    async def update_profile(self, user_id: str, user_metadata: dict) -> Profile:
        raise NotImplementedError


class Auth0ProfileDirectory(ProfileDirectory):
    PER_PAGE = 100
    # refresh the management token this many seconds before it expires
    TOKEN_LEEWAY = 60

    def __init__(
        self,
        config: Settings = settings,
        http_client_class: type[httpx.AsyncClient] = httpx.AsyncClient,
    ):
        self._config = config
        self._http_client_class = http_client_class
        self._token: str | None = None
        self._token_expires_at = 0.0

    @property
    def _base_url(self) -> str:
        return f"https://{self._config.AUTH0_DOMAIN}"

    async def _management_token(self, client: httpx.AsyncClient) -> str:
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        response = await client.post(
            "/oauth/token",
            json={
                "grant_type": "client_credentials",
                "client_id": self._config.AUTH0_MANAGEMENT_CLIENT_ID,
                "client_secret": self._config.AUTH0_MANAGEMENT_CLIENT_SECRET,
                "audience": f"{self._base_url}/api/v2/",
            },
        )
        response.raise_for_status()
        data = response.json()
        self._token = data["access_token"]
        self._token_expires_at = time.monotonic() + data.get("expires_in", 0) - self.TOKEN_LEEWAY
        return self._token

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            async with self._http_client_class(
                base_url=self._base_url, timeout=self._config.HTTP_TIMEOUT_SECONDS
            ) as client:
                token = await self._management_token(client)
                response = await client.request(
                    method,
                    path,
                    headers={"Authorization": f"Bearer {token}"},
                    **kwargs,
                )
                if response.status_code == 404:
                    raise NotFoundError(f"No user at {path}")
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            logger.error(f"Identity provider request {method} {path} failed: {e}")
            raise UpstreamUnavailableError("Identity provider unavailable") from e

    async def list_profiles(self, page: int) -> list[Profile]:
        users = await self._request(
            "GET", "/api/v2/users", params={"per_page": self.PER_PAGE, "page": page}
        )
        return [Profile.from_auth0_user(user) for user in users]

    async def list_all_profiles(self) -> list[Profile]:
        pages = await asyncio.gather(
            *(self.list_profiles(page) for page in range(self._config.PROFILE_PAGES))
        )
        return [profile for page in pages for profile in page]

    async def get_profile(self, user_id: str) -> Profile:
        user = await self._request("GET", f"/api/v2/users/{user_id}")
        return Profile.from_auth0_user(user)

    async def update_profile(self, user_id: str, user_metadata: dict) -> Profile:
        user = await self._request(
            "PATCH", f"/api/v2/users/{user_id}", json={"user_metadata": user_metadata}
        )
        return Profile.from_auth0_user(user)


@lru_cache
def get_profile_directory() -> ProfileDirectory:
    """Factory for the profile directory. Override in tests."""
    return Auth0ProfileDirectory()
