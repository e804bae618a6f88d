"""Resilient async HTTP client shared by the archive and evaluation adapters."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
import pydantic
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from elocatalog.config.storage import get_http_cache_path
from elocatalog.domain.errors import UpstreamSourceError, UpstreamTimeoutError

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import (
        HeaderTypes,
        QueryParamTypes,
        RequestContent,
        TimeoutTypes,
        URLTypes,
    )

    from elocatalog.config.http_resilience import (
        CacheConfig,
        ResilienceConfig,
        RetryPolicy,
        ShouldCacheHook,
    )
    from elocatalog.domain.model import Source


class RequestOptions(TypedDict, total=False):
    """Per-request keyword arguments the archive and evaluation clients pass through."""

    params: QueryParamTypes | None
    json: object
    content: RequestContent | None
    headers: HeaderTypes | None
    timeout: TimeoutTypes | UseClientDefault


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    transport: httpx.AsyncBaseTransport


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
        backoff_jitter=policy.backoff_jitter,
    )


def _client_options(config: ResilienceConfig) -> AsyncClientOptions:
    options: AsyncClientOptions = {
        "timeout": config.timeout_seconds,
        "transport": RetryTransport(retry=build_retry(config.retry)),
    }
    if config.base_url is not None:
        options["base_url"] = config.base_url
    if config.headers:
        options["headers"] = dict(config.headers)
    return options


class ResilientClient:
    """httpx client with retries, an optional rate limit and an optional hishel cache.

    Use as an async context manager; one instance serves one ``asyncio.run`` call.
    """

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = None
        if config.ratelimit is not None:
            self._limiter = AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)

        options = _client_options(config)
        storage, policy = _build_cache_components(config.cache)
        if storage is None:
            self._client = httpx.AsyncClient(**options)
        else:
            self._client = AsyncCacheClient(**options, storage=storage, policy=policy)

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

    async def _throttle(self) -> None:
        if self._limiter is not None:
            await self._limiter.acquire()

    async def request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        await self._throttle()
        return await self._client.request(method, url, **kwargs)

    async def get(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    @asynccontextmanager
    async def stream(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> AsyncIterator[httpx.Response]:
        """Open a streamed response; the rate limit applies to opening it only."""

        await self._throttle()
        async with self._client.stream(method, url, **kwargs) as response:
            yield response


@contextmanager
def upstream_errors(source: Source | str) -> Iterator[None]:
    """Translate transport and payload failures into the catalog's upstream errors."""

    try:
        yield
    except httpx.TimeoutException as exc:
        raise UpstreamTimeoutError(f"{source} timed out: {exc}", source=source) from exc
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        raise UpstreamSourceError(f"{source} answered HTTP {status}", source=source) from exc
    except httpx.HTTPError as exc:
        raise UpstreamSourceError(f"{source} request failed: {exc}", source=source) from exc
    except json.JSONDecodeError as exc:
        raise UpstreamSourceError(
            f"{source} returned a body that is not JSON", source=source
        ) from exc
    except pydantic.ValidationError as exc:
        raise UpstreamSourceError(
            f"{source} returned an unexpected payload: {exc.error_count()} error(s)",
            source=source,
        ) from exc


class _ShouldCacheResponseFilter(BaseFilter[HishelCacheResponse]):
    """Hishel response filter that delegates to a simple JSON predicate."""

    def __init__(self, predicate: ShouldCacheHook) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if body is None:
            return True
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return True
        return bool(self._predicate(payload))


def _build_cache_components(
    config: CacheConfig | None,
) -> tuple[AsyncSqliteStorage | None, FilterPolicy | None]:
    if config is None or not config.enabled:
        return None, None

    if config.backend not in {"sqlite", "memory"}:
        msg = f"Unsupported cache backend: {config.backend}"
        raise ValueError(msg)

    if config.backend == "sqlite":
        database_path = str(get_http_cache_path())
    else:
        database_path = ":memory:"
    storage = AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.ttl_seconds,
        refresh_ttl_on_access=True,
    )

    policy: FilterPolicy | None = None
    if config.should_cache is not None:
        policy = FilterPolicy(response_filters=[_ShouldCacheResponseFilter(config.should_cache)])

    return storage, policy
