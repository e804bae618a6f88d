"""Chess.com configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .env import require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from .http_resilience import ShouldCacheHook

CHESSCOM_BASE_URL = "https://api.chess.com/pub"
CHESSCOM_TIMEOUT_SECONDS = 30.0
CHESSCOM_DEADLINE_SECONDS = 45.0
CHESSCOM_MAX_ARCHIVES = 3


@dataclass(frozen=True, slots=True)
class ChessComConfig:
    """Holds Chess.com published-data API configuration values."""

    user_agent: str
    resilience: ResilienceConfig
    max_archives: int = CHESSCOM_MAX_ARCHIVES
    deadline_seconds: float = CHESSCOM_DEADLINE_SECONDS


def chesscom_resilience(
    user_agent: str,
    *,
    should_cache: ShouldCacheHook | None = None,
) -> ResilienceConfig:
    return ResilienceConfig(
        name="chesscom",
        base_url=CHESSCOM_BASE_URL,
        timeout_seconds=CHESSCOM_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=3, per_seconds=1.0),
        retry=RetryPolicy(total=2),
        cache=CacheConfig(backend="memory", should_cache=should_cache),
        headers={"User-Agent": user_agent},
    )


def get_chesscom_config(
    *,
    resilience: ResilienceConfig | None = None,
    should_cache: ShouldCacheHook | None = None,
) -> ChessComConfig:
    values = require_env_vars(("CHESSCOM_USER_AGENT",))
    user_agent = values["CHESSCOM_USER_AGENT"].strip()
    return ChessComConfig(
        user_agent=user_agent,
        resilience=resilience or chesscom_resilience(user_agent, should_cache=should_cache),
    )
