"""Lichess configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

LICHESS_BASE_URL = "https://lichess.org/api"
LICHESS_TIMEOUT_SECONDS = 60.0
LICHESS_DEADLINE_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class LichessConfig:
    resilience: ResilienceConfig
    api_token: str | None = None
    deadline_seconds: float = LICHESS_DEADLINE_SECONDS


def get_lichess_config(*, resilience: ResilienceConfig | None = None) -> LichessConfig:
    api_token = optional_env_var("LICHESS_API_TOKEN")
    headers = {"Accept": "application/x-ndjson"}
    if api_token is not None:
        headers["Authorization"] = f"Bearer {api_token}"

    return LichessConfig(
        api_token=api_token,
        resilience=resilience
        or ResilienceConfig(
            name="lichess",
            base_url=LICHESS_BASE_URL,
            timeout_seconds=LICHESS_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
            retry=RetryPolicy(total=2),
            # NDJSON exports change with every finished game
            cache=None,
            headers=headers,
        ),
    )
