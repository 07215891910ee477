"""Rate limit aware, TTL caching access to the GitHub API."""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from templatehub.logger import get_logger
from templatehub.models.github import ErrorCode, RateLimit
from templatehub.utils.result import Err, Ok, Result

logger = get_logger(__name__)

RATE_LIMIT_MARKER = "rate limit exceeded"


@dataclass(frozen=True)
class CacheEntry:
    """A fetched response body and the instant it stops being served."""

    body: str
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


class RateLimitedCache:
    """
    GETs GitHub API endpoints through an in-memory TTL cache.

    One instance is meant to live for the whole process; its "blocked until"
    instant applies to every URL once GitHub reports the quota as exhausted.
    """

    def __init__(
        self,
        base_url: str = "https://api.github.com/",
        ttl: float = 30.0,
        rate_limit_backoff: float = 60.0,
        user_agent: str = "templatehub",
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Args:
            base_url: Only URLs starting with this prefix may be fetched
            ttl: Seconds a successful response is served from memory
            rate_limit_backoff: Block duration when the reset time is unknown
            user_agent: User-Agent header sent to GitHub (required by the API)
            client: HTTP client to use; one is created and owned otherwise
            clock: Wall clock in UTC epoch seconds
        """
        self.base_url = base_url
        self.ttl = ttl
        self.rate_limit_backoff = rate_limit_backoff
        self._clock = clock
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": user_agent, "Accept": "application/vnd.github+json"},
            follow_redirects=True,
        )
        self._entries: dict[str, CacheEntry] = {}
        self._blocked_until = 0.0
        self._lock = threading.Lock()

    def blocked_for(self) -> float:
        """Seconds left before the API may be used again."""
        with self._lock:
            return max(0.0, self._blocked_until - self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self, url: str) -> Result[str, ErrorCode]:
        """
        GET an API endpoint.

        Args:
            url: Absolute URL below ``base_url``

        Returns:
            Response body, or the reason it could not be obtained

        Raises:
            ValueError: If the URL does not belong to the API host
        """
        if not url.startswith(self.base_url):
            raise ValueError(f"The URL must be below {self.base_url}: {url}")

        now = self._clock()
        with self._lock:
            entry = self._entries.get(url)
            if entry is not None and entry.is_fresh(now):
                return Ok(entry.body)
            if now < self._blocked_until:
                logger.debug("Rate limited, skipping request", url=url, blocked_for=self._blocked_until - now)
                return Err(ErrorCode.RATE_LIMITED)

        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            logger.error("GitHub request failed", url=url, error=str(e))
            return Err(ErrorCode.NETWORK_ERROR)

        body = response.text
        rate_limit = RateLimit.from_headers(response.headers)
        if rate_limit.exhausted or (not response.is_success and RATE_LIMIT_MARKER in body.lower()):
            self._arm_block(rate_limit)
            logger.warning("GitHub rate limit reached", url=url, reset=rate_limit.reset, limit=rate_limit.limit)
            return Err(ErrorCode.RATE_LIMITED)

        if not response.is_success:
            logger.error("GitHub request returned an error status", url=url, status_code=response.status_code)
            return Err(ErrorCode.HTTP_ERROR)

        with self._lock:
            self._entries[url] = CacheEntry(body=body, expires_at=self._clock() + self.ttl)
        return Ok(body)

    def _arm_block(self, rate_limit: RateLimit) -> None:
        now = self._clock()
        blocked_until = float(rate_limit.reset) if rate_limit.reset is not None else 0.0
        if blocked_until <= now:
            blocked_until = now + self.rate_limit_backoff
        with self._lock:
            self._blocked_until = max(self._blocked_until, blocked_until)
