"""
API client for the PokeAPI catalog.

Exposes the handful of list/get lookups the export needs and wraps them in the
usual infrastructure: a pooled `aiohttp` session, a concurrency semaphore,
request deduplication, retries with exponential backoff and a circuit breaker.
Caching is not done here; callers put a `CacheStore` in front of these methods.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Dict, Optional

import aiohttp

from catalog.api_models import (
    Ability,
    DeduplicationStats,
    GrowthRate,
    NamedResourceList,
    Pokemon,
    PokemonForm,
    Species,
)
from catalog.circuit_breaker import CircuitBreaker
from catalog.constants import (
    BREAKER_FAILURE_THRESHOLD,
    BREAKER_RECOVERY_TIMEOUT,
    CONNECTION_KEEPALIVE_TIMEOUT,
    CONNECTION_POOL_LIMIT,
    CONNECTION_POOL_LIMIT_PER_HOST,
    USER_AGENT,
)
from catalog.decorators import retry_on_error
from config.settings import (
    API_REQUEST_TIMEOUT,
    MAX_CONCURRENT_API_REQUESTS,
    MAX_RETRY_ATTEMPTS,
    POKEAPI_URL,
    RETRY_BASE_DELAY,
    RETRY_MAX_DELAY,
)

logger = logging.getLogger("dexport.api")


class CatalogAPIError(Exception):
    """Base class for catalog lookups that cannot be satisfied."""


class CatalogNotFoundError(CatalogAPIError):
    """Raised when PokeAPI answers 404 for a referenced resource."""


class PokeAPIClient:
    """
    Client for the PokeAPI v2 REST catalog.

    Key Features:
    - **Connection Pooling**: Uses `aiohttp.TCPConnector` to reuse connections.
    - **Rate Limiting**: A semaphore bounds simultaneous HTTP requests.
    - **Request Deduplication**: Simultaneous requests for the same URL share
      a single API call.
    - **Retries**: 429/5xx responses, connection errors and timeouts are
      retried with exponential backoff.
    - **Circuit Breaker**: Repeated failures stop the crawl early.
    """

    def __init__(
        self,
        base_url: str = POKEAPI_URL,
        max_concurrent_requests: int = MAX_CONCURRENT_API_REQUESTS,
        request_timeout: float = API_REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRY_ATTEMPTS,
        retry_base_delay: float = RETRY_BASE_DELAY,
        retry_max_delay: float = RETRY_MAX_DELAY,
    ):
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self.session: Optional[aiohttp.ClientSession] = None

        # Read by retry_on_error
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay

        # Session creation lock to prevent race conditions during lazy loading
        self._session_lock = asyncio.Lock()
        self._rate_limiter = asyncio.Semaphore(max_concurrent_requests)

        # Number of HTTP requests actually sent
        self.request_count = 0

        self._breaker = CircuitBreaker(
            failure_threshold=BREAKER_FAILURE_THRESHOLD,
            recovery_timeout=BREAKER_RECOVERY_TIMEOUT,
            expected_exceptions=(
                aiohttp.ClientError,
                asyncio.TimeoutError,
            ),
            name="pokeapi",
        )

        # Tracks in-flight requests to prevent duplicate API calls
        self._pending_requests: Dict[str, asyncio.Task] = {}
        self._request_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def _deduplicate_request(
        self, key: str, fetch_func, *args, **kwargs
    ) -> Optional[Any]:
        """
        Deduplicate concurrent requests for the same data.

        The lock is held only while creating or retrieving the pending task,
        never while awaiting the network result, so unrelated requests are not
        serialized.

        Args:
            key: Unique key identifying this request resource.
            fetch_func: Async function to call if no request is pending.
            *args: Arguments for fetch_func.
            **kwargs: Keyword arguments for fetch_func.

        Returns:
            Result from fetch_func or shared result from a pending request.
        """
        created = False

        async with self._request_locks[key]:
            if key in self._pending_requests:
                task = self._pending_requests[key]
                logger.debug(
                    "Request deduplication: Joining existing request",
                    extra={"key": key[:50]},
                )
            else:
                task = asyncio.create_task(fetch_func(*args, **kwargs))
                self._pending_requests[key] = task
                created = True

        try:
            return await task
        finally:
            # Only the creator cleans up, lock included
            if created:
                async with self._request_locks[key]:
                    if self._pending_requests.get(key) is task:
                        del self._pending_requests[key]
                    self._request_locks.pop(key, None)

    async def get_session(self) -> aiohttp.ClientSession:
        """
        Get or create the aiohttp session with connection pooling configuration.

        Returns:
            Active aiohttp ClientSession.
        """
        async with self._session_lock:
            if self.session is None or self.session.closed:
                timeout = aiohttp.ClientTimeout(total=self.request_timeout)

                connector = aiohttp.TCPConnector(
                    limit=CONNECTION_POOL_LIMIT,
                    limit_per_host=CONNECTION_POOL_LIMIT_PER_HOST,
                    ttl_dns_cache=300,
                    keepalive_timeout=CONNECTION_KEEPALIVE_TIMEOUT,
                )

                self.session = aiohttp.ClientSession(
                    timeout=timeout,
                    connector=connector,
                    headers={"User-Agent": USER_AGENT},
                )

                logger.info(
                    "Created aiohttp session with connection pooling",
                    extra={
                        "total_limit": CONNECTION_POOL_LIMIT,
                        "per_host_limit": CONNECTION_POOL_LIMIT_PER_HOST,
                        "base_url": self.base_url,
                    },
                )

        return self.session

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self.session and not self.session.closed:
            await self.session.close()
            stats = self.get_stats()
            logger.info(
                f"API client session closed (requests sent: {stats['requests_sent']}, "
                f"circuit breaker: {stats['circuit_breaker']['state']}, "
                f"failures: {stats['circuit_breaker']['failure_count']})",
                extra=stats,
            )

    @retry_on_error()
    async def _get_json(self, path: str, params: Optional[Dict[str, int]] = None) -> Any:
        """
        GET a catalog path and decode the JSON body.

        Args:
            path: Path relative to the base URL (e.g. 'pokemon/bulbasaur').
            params: Optional query parameters.

        Returns:
            Decoded JSON payload.

        Raises:
            CatalogNotFoundError: On 404 (not retried).
            aiohttp.ClientError: On other failures once retries are exhausted.
            CircuitBreakerError: If the breaker is open.
        """
        url = f"{self.base_url}/{path.strip('/')}"
        dedup_key = url
        if params:
            query = "&".join(f"{k}={v}" for k, v in sorted(params.items()))
            dedup_key = f"{url}?{query}"

        async def _fetch():
            return await self._breaker.call(self._request_json, url, params)

        return await self._deduplicate_request(dedup_key, _fetch)

    async def _request_json(
        self, url: str, params: Optional[Dict[str, int]] = None
    ) -> Any:
        """Internal method performing one HTTP request (wrapped by circuit breaker)."""
        session = await self.get_session()

        async with self._rate_limiter:
            self.request_count += 1
            logger.debug(f"Fetching {url}", extra={"params": params})

            async with session.get(url, params=params) as resp:
                if resp.status == 200:
                    return await resp.json(content_type=None)

                if resp.status == 404:
                    raise CatalogNotFoundError(f"PokeAPI resource not found: {url}")

                logger.warning(f"PokeAPI error {resp.status} for {url}")
                # Raise to trigger retry and circuit breaker
                raise aiohttp.ClientResponseError(
                    request_info=resp.request_info,
                    history=resp.history,
                    status=resp.status,
                )

    async def list_species(self, limit: int, offset: int = 0) -> NamedResourceList:
        """Fetch one page of the species list."""
        return await self._get_json(
            "pokemon-species", {"limit": limit, "offset": offset}
        )

    async def get_species(self, name: str) -> Species:
        return await self._get_json(f"pokemon-species/{name}")

    async def get_pokemon(self, name: str) -> Pokemon:
        return await self._get_json(f"pokemon/{name}")

    async def get_pokemon_form(self, name: str) -> PokemonForm:
        return await self._get_json(f"pokemon-form/{name}")

    async def get_ability(self, name: str) -> Ability:
        return await self._get_json(f"ability/{name}")

    async def list_growth_rates(self) -> NamedResourceList:
        """Fetch the growth-rate list (a handful of entries, never paged)."""
        return await self._get_json("growth-rate")

    async def get_growth_rate(self, name: str) -> GrowthRate:
        return await self._get_json(f"growth-rate/{name}")

    def get_deduplication_stats(self) -> DeduplicationStats:
        """
        Get request deduplication statistics.

        Returns:
            DeduplicationStats object.
        """
        return {
            "pending_requests": len(self._pending_requests),
            "active_locks": len(self._request_locks),
        }

    def get_stats(self) -> Dict[str, Any]:
        """
        Get client statistics for the end-of-run summary.

        Returns:
            Dictionary with request count, breaker and deduplication stats.
        """
        return {
            "requests_sent": self.request_count,
            "circuit_breaker": self._breaker.get_stats(),
            **self.get_deduplication_stats(),
        }
