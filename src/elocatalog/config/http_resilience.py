"""Settings for the shared HTTP client: retries, throttling and response caching.

Each upstream (Chess.com, Lichess, the evaluation service) builds one
``ResilienceConfig``; ``elocatalog.adapters.http_resilience`` turns it into a
client.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Final, Literal

import httpx

ShouldCacheHook = Callable[[object], bool]
"""Given a decoded JSON body, decide whether the response may be cached."""

IDEMPOTENT_METHODS: Final[frozenset[str]] = frozenset({"GET", "HEAD", "OPTIONS"})
TRANSIENT_STATUSES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    total: int = 3
    backoff_factor: float = 0.5
    backoff_jitter: float = 1.0
    max_backoff_wait: float = 30.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = IDEMPOTENT_METHODS
    status_forcelist: frozenset[int] = TRANSIENT_STATUSES
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )


@dataclass(slots=True, frozen=True)
class RateLimit:
    """At most ``max_calls`` requests in any window of ``per_seconds``."""

    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class CacheConfig:
    enabled: bool = True
    backend: Literal["sqlite", "memory"] = "memory"
    ttl_seconds: float | None = None
    should_cache: ShouldCacheHook | None = None


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = field(default_factory=CacheConfig)
    headers: Mapping[str, str] | None = None
