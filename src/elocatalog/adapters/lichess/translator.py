"""Translate Lichess export lines into fetched game records."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from elocatalog.domain.model import GameResult, LichessRecord

from .schema import GamePayload

if TYPE_CHECKING:
    from .schema import ClockPayload, PlayerPayload

log = getLogger(__name__)

LICHESS_GAME_URL = "https://lichess.org/{game_id}"
STANDARD_VARIANTS = frozenset({"standard"})
_UNFINISHED_STATUSES = frozenset({"created", "started"})
_ANONYMOUS = "Anonymous"


def game_url(game_id: str) -> str:
    return LICHESS_GAME_URL.format(game_id=game_id)


def map_result(winner: str | None, status: str | None) -> GameResult:
    if winner == "white":
        return GameResult.WHITE_WIN
    if winner == "black":
        return GameResult.BLACK_WIN
    if status in _UNFINISHED_STATUSES:
        return GameResult.ONGOING
    return GameResult.DRAW


def format_clock(clock: ClockPayload | None) -> str | None:
    """``initial`` seconds and ``increment`` seconds as ``minutes+increment``."""

    if clock is None:
        return None
    minutes = clock.initial / 60
    minutes_text = str(int(minutes)) if minutes.is_integer() else f"{minutes:g}"
    return f"{minutes_text}+{clock.increment}"


def _player_name(player: PlayerPayload) -> str:
    if player.user is not None:
        return player.user.name
    if player.ai_level is not None:
        return f"Stockfish level {player.ai_level}"
    return _ANONYMOUS


def parse_game(payload: GamePayload) -> LichessRecord | None:
    """Build a record from one export line; non-standard variants return ``None``."""

    if payload.variant not in STANDARD_VARIANTS:
        log.debug("Skipping %s game %s", payload.variant, payload.id)
        return None
    return LichessRecord(
        raw_id=game_url(payload.id),
        white_player=_player_name(payload.players.white),
        black_player=_player_name(payload.players.black),
        white_rating=payload.players.white.rating,
        black_rating=payload.players.black.rating,
        result=map_result(payload.winner, payload.status),
        time_control=format_clock(payload.clock),
        played_at=datetime.fromtimestamp(payload.created_at / 1000, tz=UTC),
        moves=payload.moves,
        opening_name=payload.opening.name if payload.opening else None,
    )
