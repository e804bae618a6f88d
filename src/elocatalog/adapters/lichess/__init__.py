"""Public interface for the Lichess adapter."""

from __future__ import annotations

from .client import LichessFetcher, export_size, parse_export
from .schema import GamePayload
from .translator import format_clock, game_url, map_result, parse_game

__all__ = [
    "GamePayload",
    "LichessFetcher",
    "export_size",
    "format_clock",
    "game_url",
    "map_result",
    "parse_export",
    "parse_game",
]
