"""HTTP client for the Lichess game export API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import pydantic

from elocatalog.adapters.http_resilience import ResilientClient, upstream_errors
from elocatalog.config.lichess import LichessConfig, get_lichess_config
from elocatalog.domain.model import Source

from .schema import GamePayload
from .translator import parse_game

if TYPE_CHECKING:
    from collections.abc import Callable

    from elocatalog.config.http_resilience import ResilienceConfig
    from elocatalog.domain.model import LichessRecord
    from elocatalog.domain.ports.fetching import GameFetcher

log = getLogger(__name__)

MIN_EXPORT_SIZE = 100
MAX_EXPORT_SIZE = 300
FETCH_MULTIPLIER = 3


def export_size(limit: int) -> int:
    return min(max(limit * FETCH_MULTIPLIER, MIN_EXPORT_SIZE), MAX_EXPORT_SIZE)


def parse_export(body: str) -> list[LichessRecord]:
    """Parse an NDJSON export body; unreadable lines are dropped."""

    records: list[LichessRecord] = []
    for number, line in enumerate(body.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            payload = GamePayload.model_validate_json(line)
        except pydantic.ValidationError:
            log.warning("Dropping unreadable Lichess export line %s", number)
            continue
        record = parse_game(payload)
        if record is not None:
            records.append(record)
    return records


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class LichessFetcher:
    config: LichessConfig = field(default_factory=get_lichess_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def __call__(self, *, account: str, limit: int) -> list[LichessRecord]:
        with upstream_errors(Source.LICHESS):
            return asyncio.run(self._fetch_games_async(account=account, limit=limit))

    async def _fetch_games_async(self, *, account: str, limit: int) -> list[LichessRecord]:
        params = {"max": export_size(limit), "opening": "true", "moves": "true"}
        async with self.client_factory(self.config.resilience) as client:
            response = await client.get(f"/games/user/{account.strip()}", params=params)
            response.raise_for_status()
            records = parse_export(response.text)

        log.info("Fetched %s Lichess games for %s", len(records), account)
        return records


if TYPE_CHECKING:
    _fetcher_check: GameFetcher = LichessFetcher()
