"""Public interface for the Chess.com adapter."""

from __future__ import annotations

from .client import ChessComFetcher, fetch_target
from .schema import ArchivesResponse, GamePayload, MonthlyArchiveResponse
from .translator import map_result, parse_game

__all__ = [
    "ArchivesResponse",
    "ChessComFetcher",
    "GamePayload",
    "MonthlyArchiveResponse",
    "fetch_target",
    "map_result",
    "parse_game",
]
