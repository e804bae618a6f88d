"""Pydantic models describing one line of the Lichess NDJSON game export."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class LichessBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class UserPayload(LichessBaseModel):
    name: str
    id: str | None = None


class PlayerPayload(LichessBaseModel):
    user: UserPayload | None = None
    rating: int | None = None
    ai_level: int | None = Field(default=None, alias="aiLevel")


class PlayersPayload(LichessBaseModel):
    white: PlayerPayload = Field(default_factory=PlayerPayload)
    black: PlayerPayload = Field(default_factory=PlayerPayload)


class ClockPayload(LichessBaseModel):
    initial: int
    increment: int
    total_time: int | None = Field(default=None, alias="totalTime")


class OpeningPayload(LichessBaseModel):
    eco: str | None = None
    name: str | None = None


class GamePayload(LichessBaseModel):
    id: str
    rated: bool | None = None
    variant: str = "standard"
    speed: str | None = None
    status: str | None = None
    created_at: int = Field(alias="createdAt")
    players: PlayersPayload = Field(default_factory=PlayersPayload)
    winner: Literal["white", "black"] | None = None
    moves: str = ""
    clock: ClockPayload | None = None
    opening: OpeningPayload | None = None
