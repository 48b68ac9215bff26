import asyncio
import logging
import time
from typing import Any

import httpx

from facecards.domain import constants as C
from facecards.domain.errors import DirectoryAuthError, DirectoryUnavailableError

# Fields the game needs; everything else in a profile stays upstream.
PROFILE_FIELDS = ("id", "name", "first_name", "image_path", "pronouns")


def slim_profile(profile: dict[str, Any]) -> dict[str, Any]:
    return {key: profile.get(key) for key in PROFILE_FIELDS}


class DirectoryClient:
    """Adapter for the community directory's paged profiles API (HTTP, bearer token)."""

    def __init__(
        self,
        url: str = C.DEFAULT_DIRECTORY_URL,
        scope: str = C.DEFAULT_DIRECTORY_SCOPE,
        page_size: int = C.DIRECTORY_PAGE_SIZE,
        timeout: float = C.REQUEST_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.url = url
        self.scope = scope
        self.page_size = page_size
        self.timeout = timeout
        self._client = client

    async def _fetch_page(self, token: str, offset: int) -> list[dict[str, Any]]:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)

        params = {"scope": self.scope, "limit": self.page_size, "offset": offset}
        try:
            resp = await self._client.get(
                self.url, params=params, headers={"Authorization": f"Bearer {token}"}
            )
        except httpx.HTTPError as e:
            self.logger.error(f"Directory request failed: {e}")
            raise DirectoryUnavailableError(f"Directory unreachable: {e}") from e

        if resp.status_code == 401:
            raise DirectoryAuthError("Directory rejected the token; log in again.")
        if not resp.is_success:
            self.logger.error(f"Directory returned HTTP {resp.status_code}")
            raise DirectoryUnavailableError(
                f"Directory returned HTTP {resp.status_code}", status_code=resp.status_code
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise DirectoryUnavailableError("Directory returned invalid JSON") from e
        if not isinstance(data, list):
            raise DirectoryUnavailableError("Directory returned an unexpected payload")
        return data

    async def fetch_all_profiles(self, token: str) -> list[dict[str, Any]]:
        """
        Page through the whole directory.

        Stops at an empty or short page, or once ``results_count`` (carried
        on each profile by the upstream API) profiles have been read.
        """
        profiles: list[dict[str, Any]] = []
        offset = 0
        total_count: int | None = None

        while total_count is None or offset < total_count:
            self.logger.info(f"Fetching profiles starting at offset {offset}...")
            page = await self._fetch_page(token, offset)
            if not page:
                break

            if total_count is None and isinstance(page[0], dict):
                results_count = page[0].get("results_count")
                if isinstance(results_count, int):
                    total_count = results_count
                    self.logger.info(f"Total results to fetch: {total_count}")

            profiles.extend(slim_profile(p) for p in page if isinstance(p, dict))
            offset += self.page_size

            if len(page) < self.page_size:
                break

        return profiles

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None


class DirectoryCache:
    """
    Keeps the last fetched roster in memory for ``ttl`` seconds.

    Concurrent callers share one upstream fetch. Failures are never cached.
    """

    def __init__(self, client: DirectoryClient, ttl: float = C.CACHE_DURATION):
        self.logger = logging.getLogger(__name__)
        self.client = client
        self.ttl = ttl
        self._profiles: list[dict[str, Any]] | None = None
        self._fetched_at = 0.0
        self._lock = asyncio.Lock()

    def _fresh(self) -> bool:
        return self._profiles is not None and (time.monotonic() - self._fetched_at) < self.ttl

    async def get(self, token: str | None) -> list[dict[str, Any]]:
        if not token:
            raise DirectoryAuthError("No directory token available; log in first.")
        if self._fresh():
            self.logger.info("Serving directory from cache")
            return self._profiles  # type: ignore[return-value]

        async with self._lock:
            if self._fresh():
                return self._profiles  # type: ignore[return-value]
            profiles = await self.client.fetch_all_profiles(token)
            self._profiles = profiles
            self._fetched_at = time.monotonic()
            return profiles

    def invalidate(self) -> None:
        self._profiles = None
        self._fetched_at = 0.0
