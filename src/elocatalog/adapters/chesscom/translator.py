"""Translate Chess.com archive payloads into fetched game records."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from urllib.parse import urlsplit

from elocatalog.domain.model import ChessComRecord, GameResult

from .schema import GamePayload, GamePayloadInput

log = getLogger(__name__)

STANDARD_RULES = "chess"


def _ensure_game_payload(game: GamePayloadInput) -> GamePayload:
    if isinstance(game, GamePayload):
        return game
    return GamePayload.model_validate(game)


def map_result(white_result: str, black_result: str) -> GameResult:
    """Chess.com reports one outcome word per side; anything but a win is a draw."""

    if white_result == "win":
        return GameResult.WHITE_WIN
    if black_result == "win":
        return GameResult.BLACK_WIN
    return GameResult.DRAW


def opening_from_eco_url(eco_url: str | None) -> str | None:
    # https://www.chess.com/openings/Sicilian-Defense-Najdorf-Variation
    if eco_url is None:
        return None
    slug = urlsplit(eco_url).path.rstrip("/").rsplit("/", 1)[-1]
    return slug.replace("-", " ") or None


def parse_game(game: GamePayloadInput) -> ChessComRecord | None:
    """Build a record from one archive entry; variants return ``None``."""

    payload = _ensure_game_payload(game)
    if payload.rules != STANDARD_RULES:
        log.debug("Skipping %s game %s", payload.rules, payload.url)
        return None
    return ChessComRecord(
        raw_id=payload.url,
        white_player=payload.white.username,
        black_player=payload.black.username,
        white_rating=payload.white.rating,
        black_rating=payload.black.rating,
        result=map_result(payload.white.result, payload.black.result),
        time_control=payload.time_control,
        played_at=datetime.fromtimestamp(payload.end_time, tz=UTC),
        moves=payload.pgn,
        opening_name=opening_from_eco_url(payload.eco),
    )
