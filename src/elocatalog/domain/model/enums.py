"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Source(StrEnum):
    CHESSCOM = "chess.com"
    LICHESS = "lichess"
    MANUAL = "manual"

    @property
    def is_external(self) -> bool:
        return self is not Source.MANUAL


class GameResult(StrEnum):
    WHITE_WIN = "1-0"
    BLACK_WIN = "0-1"
    DRAW = "1/2-1/2"
    ONGOING = "*"

    @classmethod
    def parse(cls, value: str | None) -> GameResult:
        if value is None:
            return cls.ONGOING
        cleaned = value.strip().replace("½", "1/2")
        try:
            return cls(cleaned)
        except ValueError:
            return cls.ONGOING


class EvaluationStatus(StrEnum):
    """Evaluation state of a persisted game."""

    PENDING = "pending"
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class JobStatus(StrEnum):
    """Lifecycle state of an evaluation job."""

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_JOB_STATUSES

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_JOB_STATUSES


_TERMINAL_JOB_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.CANCELLED})
ACTIVE_JOB_STATUSES = frozenset({JobStatus.QUEUED, JobStatus.RUNNING})
