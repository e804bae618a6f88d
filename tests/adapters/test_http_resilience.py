from __future__ import annotations

import asyncio

import httpx
import pydantic
import pytest

from elocatalog.adapters.http_resilience import (
    ResilientClient,
    _build_cache_components,  # noqa: PLC2701  # type: ignore[reportPrivateUsage]
    _ShouldCacheResponseFilter,  # noqa: PLC2701  # type: ignore[reportPrivateUsage]
    build_retry,
    upstream_errors,
)
from elocatalog.config.http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
)
from elocatalog.domain.errors import UpstreamSourceError, UpstreamTimeoutError
from elocatalog.domain.model import Source
from tests.helpers.http import make_client_factory


class _Payload(pydantic.BaseModel):
    name: str


def _request() -> httpx.Request:
    return httpx.Request("GET", "https://example.test/resource")


def test_upstream_errors_translates_timeouts() -> None:
    with pytest.raises(UpstreamTimeoutError, match="lichess timed out") as exc:
        with upstream_errors(Source.LICHESS):
            raise httpx.ReadTimeout("slow", request=_request())
    assert exc.value.source is Source.LICHESS


def test_upstream_errors_translates_status_errors() -> None:
    request = _request()
    response = httpx.Response(429, request=request)

    with pytest.raises(UpstreamSourceError, match="answered HTTP 429"):
        with upstream_errors("evaluation service"):
            response.raise_for_status()


def test_upstream_errors_translates_transport_errors() -> None:
    with pytest.raises(UpstreamSourceError, match="request failed"):
        with upstream_errors(Source.CHESSCOM):
            raise httpx.ConnectError("refused", request=_request())


def test_upstream_errors_translates_payload_errors() -> None:
    with pytest.raises(UpstreamSourceError, match="unexpected payload"):
        with upstream_errors(Source.CHESSCOM):
            _Payload.model_validate({"title": "nope"})


def test_upstream_errors_translates_undecodable_bodies() -> None:
    response = httpx.Response(200, text="<html></html>", request=_request())

    with pytest.raises(UpstreamSourceError, match="not JSON"):
        with upstream_errors(Source.CHESSCOM):
            response.json()


def test_upstream_errors_leaves_other_errors_alone() -> None:
    with pytest.raises(KeyError):
        with upstream_errors(Source.CHESSCOM):
            raise KeyError("missing")


def test_build_retry_copies_policy() -> None:
    retry = build_retry(RetryPolicy(total=5, backoff_factor=0.1))

    assert retry.total == 5
    assert retry.backoff_factor == 0.1


def test_cache_disabled_without_config() -> None:
    assert _build_cache_components(None) == (None, None)
    assert _build_cache_components(CacheConfig(enabled=False)) == (None, None)


def test_cache_rejects_unknown_backend() -> None:
    with pytest.raises(ValueError, match="Unsupported cache backend"):
        _build_cache_components(CacheConfig(backend="redis"))  # type: ignore[arg-type]


def test_should_cache_filter_delegates_to_predicate() -> None:
    seen: list[object] = []

    def predicate(payload: object) -> bool:
        seen.append(payload)
        return payload == {"settled": True}

    response_filter = _ShouldCacheResponseFilter(predicate)

    assert response_filter.needs_body()
    assert response_filter.apply(None, b'{"settled": true}')  # type: ignore[arg-type]
    assert not response_filter.apply(None, b'{"settled": false}')  # type: ignore[arg-type]
    # undecodable bodies fall back to hishel's own rules
    assert response_filter.apply(None, b"\xff\xfe")  # type: ignore[arg-type]
    assert response_filter.apply(None, None)  # type: ignore[arg-type]
    assert seen == [{"settled": True}, {"settled": False}]


def test_client_sends_through_limiter() -> None:
    config = ResilienceConfig(
        name="test",
        base_url="https://example.test",
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        cache=None,
        headers={"User-Agent": "elocatalog-tests"},
    )
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"path": request.url.path})

    async def run() -> tuple[dict[str, str], bytes]:
        async with make_client_factory(handler, requests=requests)(config) as client:
            response = await client.get("/one")
            async with client.stream("GET", "/two") as streamed:
                body = await streamed.aread()
        return response.json(), body

    payload, streamed_body = asyncio.run(run())

    assert payload == {"path": "/one"}
    assert b"/two" in streamed_body
    assert [request.headers["User-Agent"] for request in requests] == ["elocatalog-tests"] * 2


def test_client_without_cache_uses_plain_httpx() -> None:
    client = ResilientClient(ResilienceConfig(name="plain", cache=None))
    try:
        assert type(client._client) is httpx.AsyncClient  # noqa: SLF001
    finally:
        asyncio.run(client.aclose())
