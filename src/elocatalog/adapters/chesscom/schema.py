"""Pydantic models describing the Chess.com published-data API payloads."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class ChessComBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ArchivesResponse(ChessComBaseModel):
    archives: list[str] = Field(default_factory=list)


class PlayerPayload(ChessComBaseModel):
    username: str
    rating: int | None = None
    result: str


class GamePayload(ChessComBaseModel):
    url: str
    pgn: str = ""
    time_control: str | None = None
    end_time: int
    rated: bool | None = None
    rules: str = "chess"
    eco: str | None = None
    white: PlayerPayload
    black: PlayerPayload

    _normalize_eco = field_validator("eco", mode="before")(_blank_to_none)


class MonthlyArchiveResponse(ChessComBaseModel):
    games: list[GamePayload] = Field(default_factory=list)


GamePayloadInput = GamePayload | Mapping[str, object]
