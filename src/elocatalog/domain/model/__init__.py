"""Domain model public surface."""

from __future__ import annotations

from .entity import Entity, new_id, utcnow
from .enums import ACTIVE_JOB_STATUSES, EvaluationStatus, GameResult, JobStatus, Source
from .game import (
    ChessComRecord,
    ExternalRecord,
    GameRecord,
    LichessRecord,
    PersistedGame,
    UnifiedGame,
)
from .job import (
    GAME_STATUS_FOR_JOB,
    EvaluationJob,
    EvaluationResult,
    GameEvaluation,
    SideMetrics,
    can_move_game,
    can_transition,
)
from .user import User

__all__ = [
    "ACTIVE_JOB_STATUSES",
    "GAME_STATUS_FOR_JOB",
    "ChessComRecord",
    "Entity",
    "EvaluationJob",
    "EvaluationResult",
    "EvaluationStatus",
    "ExternalRecord",
    "GameEvaluation",
    "GameRecord",
    "GameResult",
    "JobStatus",
    "LichessRecord",
    "PersistedGame",
    "SideMetrics",
    "Source",
    "UnifiedGame",
    "User",
    "can_move_game",
    "can_transition",
    "new_id",
    "utcnow",
]
