"""Async HTTP client with rate limiting, transport retries and response caching."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from setlistsync.config.storage import get_storage_config

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._types import QueryParamTypes

    from setlistsync.config.http_resilience import CacheConfig, HttpRetryPolicy, ResilienceConfig

log = getLogger(__name__)


def build_retry(policy: HttpRetryPolicy) -> Retry:
    # provider adapters only read, so only GET is ever replayed
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=("GET",),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


def build_cache_storage(config: CacheConfig | None) -> AsyncSqliteStorage | None:
    if config is None or not config.enabled:
        return None
    if config.backend == "sqlite":
        database_path = config.sqlite_path or str(get_storage_config().http_cache_path())
    else:
        database_path = ":memory:"
    log.debug("HTTP cache (%s) at %s", config.backend, database_path)
    return AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.default_ttl_seconds,
    )


class ResilientClient:
    """``httpx.AsyncClient`` wrapper used by the provider adapters.

    Requests wait for a slot in an ``aiolimiter`` bucket, then pass through an
    ``httpx-retries`` transport and, when enabled, a ``hishel`` cache. ``transport``
    replaces the network layer underneath the retries (tests pass a
    ``httpx.MockTransport``).
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )
        retry_transport = RetryTransport(transport=transport, retry=build_retry(config.retry))
        headers = dict(config.default_headers) if config.default_headers else None
        storage = build_cache_storage(config.cache)
        if storage is not None:
            self._client: httpx.AsyncClient = AsyncCacheClient(
                timeout=config.timeout_seconds,
                transport=retry_transport,
                headers=headers,
                storage=storage,
            )
        else:
            self._client = httpx.AsyncClient(
                timeout=config.timeout_seconds,
                transport=retry_transport,
                headers=headers,
            )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: str, *, params: QueryParamTypes | None = None) -> httpx.Response:
        if self._limiter is None:
            return await self._client.get(url, params=params)
        if not self._limiter.has_capacity():
            log.debug("%s rate limit reached; waiting for a slot", self.config.name)
        async with self._limiter:
            return await self._client.get(url, params=params)
