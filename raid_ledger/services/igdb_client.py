"""
IGDB game data client
Looks up games on IGDB (authenticated with a Twitch client-credentials token)
so the registry can be seeded with names, slugs, covers and genres.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx

from .. import config

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
COVER_URL_TEMPLATE = "https://images.igdb.com/igdb/image/upload/t_cover_big/{image_id}.jpg"


class IgdbError(Exception):
    """Raised when IGDB cannot be reached or rejects the request"""


class RetryableHttpError(Exception):
    """A response status worth retrying (rate limited or upstream failure)"""

    def __init__(self, response: httpx.Response):
        super().__init__(f"HTTP {response.status_code} from {response.request.url}")
        self.response = response


async def with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    retry_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run an async operation with exponential backoff retry logic.

    Retries on transport errors and RetryableHttpError; waits retry_delay * 2**attempt
    between attempts. The last error is re-raised once attempts are exhausted.
    """
    for attempt in range(max_retries):
        try:
            return await operation()
        except (httpx.TransportError, RetryableHttpError) as e:
            if attempt == max_retries - 1:
                logger.error(f"❌ Giving up after {max_retries} attempts: {e}")
                raise
            delay = retry_delay * (2**attempt)
            logger.warning(f"⚠️ Attempt {attempt + 1}/{max_retries} failed ({e}), retrying in {delay}s")
            await sleep(delay)
    raise RuntimeError("max_retries must be at least 1")


class IgdbClient:
    """Thin async client for the IGDB v4 API"""

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        max_retries: int = config.IGDB_MAX_RETRIES,
        retry_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client_id = client_id or config.IGDB_CLIENT_ID
        self.client_secret = client_secret or config.IGDB_CLIENT_SECRET
        self.http_client = http_client
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.sleep = sleep
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        async def send() -> httpx.Response:
            if self.http_client is not None:
                response = await self.http_client.request(method, url, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=10.0) as client:
                    response = await client.request(method, url, **kwargs)
            if response.status_code in RETRYABLE_STATUS_CODES:
                raise RetryableHttpError(response)
            return response

        try:
            return await with_backoff(send, self.max_retries, self.retry_delay, self.sleep)
        except (httpx.TransportError, RetryableHttpError) as e:
            raise IgdbError(f"IGDB request failed: {e}") from e

    async def get_access_token(self) -> str:
        """Fetch (and cache until shortly before expiry) a Twitch app access token"""
        if self._token and time.time() < self._token_expires_at:
            return self._token

        response = await self._request(
            "POST",
            config.TWITCH_TOKEN_URL,
            params={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "client_credentials",
            },
        )
        if response.status_code != 200:
            logger.error(f"❌ Twitch token request failed: HTTP {response.status_code}")
            raise IgdbError(f"Twitch token request failed with HTTP {response.status_code}")

        body = response.json()
        self._token = body["access_token"]
        # Refresh a minute early
        self._token_expires_at = time.time() + int(body.get("expires_in", 3600)) - 60
        logger.info("✅ Obtained IGDB access token")
        return self._token

    async def search_games(self, query: str, limit: int = 10) -> list[dict[str, Any]]:
        """
        Search IGDB by game name.

        Returns:
            List of {igdbId, name, slug, coverUrl, genres}
        """
        if not self.is_configured():
            raise IgdbError("IGDB credentials are not configured")

        token = await self.get_access_token()
        safe_query = query.replace('"', "")
        body = f'search "{safe_query}"; fields id,name,slug,cover.image_id,genres; limit {limit};'

        response = await self._request(
            "POST",
            f"{config.IGDB_BASE_URL}/games",
            content=body,
            headers={
                "Client-ID": self.client_id,
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            },
        )
        if response.status_code != 200:
            logger.error(f"❌ IGDB search failed: HTTP {response.status_code}")
            raise IgdbError(f"IGDB search failed with HTTP {response.status_code}")

        results = []
        for row in response.json():
            cover = row.get("cover") or {}
            image_id = cover.get("image_id") if isinstance(cover, dict) else None
            results.append(
                {
                    "igdbId": row["id"],
                    "name": row["name"],
                    "slug": row.get("slug"),
                    "coverUrl": COVER_URL_TEMPLATE.format(image_id=image_id) if image_id else None,
                    "genres": row.get("genres") or [],
                }
            )

        logger.info(f"🔍 IGDB search '{query}' returned {len(results)} game(s)")
        return results
