"""httpx MockTransport plumbing for adapter tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from elocatalog.adapters.http_resilience import ResilientClient

if TYPE_CHECKING:
    from collections.abc import Callable

    from elocatalog.config.http_resilience import ResilienceConfig


def make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    requests: list[httpx.Request] | None = None,
) -> Callable[[ResilienceConfig], ResilientClient]:
    """Build a client factory whose inner client answers through ``handler``."""

    async def async_handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=resilience.base_url or "",
            headers=dict(resilience.headers or {}),
            transport=httpx.MockTransport(async_handler),
        )
        return client

    return factory
