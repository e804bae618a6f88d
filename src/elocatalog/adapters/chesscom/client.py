"""HTTP client for the Chess.com published-data API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
import pydantic

from elocatalog.adapters.http_resilience import ResilientClient, upstream_errors
from elocatalog.config.chesscom import ChessComConfig, get_chesscom_config
from elocatalog.domain.model import Source

from .schema import ArchivesResponse, MonthlyArchiveResponse
from .translator import parse_game

if TYPE_CHECKING:
    from collections.abc import Callable

    from elocatalog.config.http_resilience import ResilienceConfig
    from elocatalog.domain.model import ChessComRecord
    from elocatalog.domain.ports.fetching import GameFetcher

log = getLogger(__name__)

MAX_FETCH_TARGET = 300
FETCH_MULTIPLIER = 3


def _month_start(now: datetime) -> int:
    return int(datetime(now.year, now.month, 1, tzinfo=UTC).timestamp())


def _is_settled_archive(payload: object) -> bool:
    """Archives of past months never change again; the current one and the index do."""

    if not isinstance(payload, dict) or "games" not in payload:
        return False
    try:
        archive = MonthlyArchiveResponse.model_validate(payload)
    except pydantic.ValidationError:
        return False
    if not archive.games:
        return False
    cutoff = _month_start(datetime.now(UTC))
    return all(game.end_time < cutoff for game in archive.games)


def _default_config() -> ChessComConfig:
    return get_chesscom_config(should_cache=_is_settled_archive)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def fetch_target(limit: int) -> int:
    return min(limit * FETCH_MULTIPLIER, MAX_FETCH_TARGET)


@dataclass(slots=True)
class ChessComFetcher:
    config: ChessComConfig = field(default_factory=_default_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def __call__(self, *, account: str, limit: int) -> list[ChessComRecord]:
        with upstream_errors(Source.CHESSCOM):
            return asyncio.run(self._fetch_games_async(account=account, limit=limit))

    async def _fetch_games_async(self, *, account: str, limit: int) -> list[ChessComRecord]:
        target = fetch_target(limit)
        records: list[ChessComRecord] = []

        async with self.client_factory(self.config.resilience) as client:
            archives = await self._request_archives(client=client, account=account)
            recent = archives.archives[-self.config.max_archives :] if archives.archives else []

            # newest month first, newest game first within a month
            for archive_url in reversed(recent):
                if len(records) >= target:
                    break
                try:
                    archive = await self._request_archive(client=client, url=archive_url)
                except httpx.HTTPStatusError as exc:
                    log.warning(
                        "Skipping Chess.com archive %s: HTTP %s",
                        archive_url,
                        exc.response.status_code,
                    )
                    continue
                for payload in reversed(archive.games):
                    record = parse_game(payload)
                    if record is not None:
                        records.append(record)

        log.info("Fetched %s Chess.com games for %s", min(len(records), target), account)
        return records[:target]

    async def _request_archives(
        self,
        *,
        client: ResilientClient,
        account: str,
    ) -> ArchivesResponse:
        response = await client.get(f"/player/{account.strip().lower()}/games/archives")
        response.raise_for_status()
        return ArchivesResponse.model_validate_json(response.content)

    async def _request_archive(
        self,
        *,
        client: ResilientClient,
        url: str,
    ) -> MonthlyArchiveResponse:
        response = await client.get(url)
        response.raise_for_status()
        return MonthlyArchiveResponse.model_validate_json(response.content)


if TYPE_CHECKING:
    _fetcher_check: GameFetcher = ChessComFetcher()
