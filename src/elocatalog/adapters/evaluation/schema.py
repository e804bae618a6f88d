"""Pydantic models for the evaluation service's JSON and NDJSON payloads."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class EvaluationBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AnalyzeGameRequest(EvaluationBaseModel):
    game_id: str = Field(alias="gameId")
    pgn: str
    depth: int


class GameMetricsPayload(EvaluationBaseModel):
    accuracy: float
    acpl: float
    blunders: int = 0
    mistakes: int = 0
    inaccuracies: int = 0
    total_moves: int = Field(default=0, alias="totalMoves")


class GameAnalysisPayload(EvaluationBaseModel):
    game_id: str = Field(alias="gameId")
    white_metrics: GameMetricsPayload = Field(alias="whiteMetrics")
    black_metrics: GameMetricsPayload = Field(alias="blackMetrics")
    depth: int | None = None
    total_positions: int | None = Field(default=None, alias="totalPositions")
    total_time_ms: int | None = Field(default=None, alias="totalTimeMs")
    engine_version: str | None = Field(default=None, alias="engineVersion")


class GameAnalysisProgressPayload(EvaluationBaseModel):
    """One line of the streaming endpoint."""

    game_id: str = Field(alias="gameId")
    status: Literal["queued", "analyzing", "completed", "failed"]
    current_move: int = Field(default=0, alias="currentMove")
    total_moves: int = Field(default=0, alias="totalMoves")
    error_message: str | None = Field(default=None, alias="errorMessage")
    analysis: GameAnalysisPayload | None = None
