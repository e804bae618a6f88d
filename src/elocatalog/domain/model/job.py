"""Evaluation jobs and the metrics they produce."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from elocatalog.domain.model.entity import Entity, utcnow
from elocatalog.domain.model.enums import EvaluationStatus, JobStatus

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


JOB_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.QUEUED: frozenset({JobStatus.RUNNING, JobStatus.CANCELLED}),
    JobStatus.RUNNING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED}),
    JobStatus.FAILED: frozenset({JobStatus.QUEUED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.CANCELLED: frozenset(),
}

# Game status mirrored from the job status after each transition.
GAME_STATUS_FOR_JOB: dict[JobStatus, EvaluationStatus] = {
    JobStatus.QUEUED: EvaluationStatus.QUEUED,
    JobStatus.RUNNING: EvaluationStatus.PROCESSING,
    JobStatus.COMPLETED: EvaluationStatus.COMPLETED,
    JobStatus.FAILED: EvaluationStatus.FAILED,
    JobStatus.CANCELLED: EvaluationStatus.PENDING,
}

GAME_TRANSITIONS: dict[EvaluationStatus, frozenset[EvaluationStatus]] = {
    EvaluationStatus.PENDING: frozenset({EvaluationStatus.QUEUED}),
    EvaluationStatus.QUEUED: frozenset({EvaluationStatus.PROCESSING, EvaluationStatus.PENDING}),
    EvaluationStatus.PROCESSING: frozenset(
        {EvaluationStatus.COMPLETED, EvaluationStatus.FAILED, EvaluationStatus.PENDING}
    ),
    EvaluationStatus.FAILED: frozenset({EvaluationStatus.QUEUED}),
    EvaluationStatus.COMPLETED: frozenset(),
}


def can_transition(current: JobStatus, target: JobStatus) -> bool:
    return target in JOB_TRANSITIONS[current]


def can_move_game(current: EvaluationStatus, target: EvaluationStatus) -> bool:
    return current == target or target in GAME_TRANSITIONS[current]


@dataclass(eq=False, kw_only=True)
class EvaluationJob(Entity):
    """One tracked request to evaluate a persisted game."""

    game_id: UUID
    depth: int
    priority: int
    status: JobStatus = JobStatus.QUEUED
    analyzed_positions: int = 0
    total_positions: int = 0
    error_message: str | None = None
    retry_count: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    @property
    def progress(self) -> float:
        if self.total_positions <= 0:
            return 0.0
        return self.analyzed_positions / self.total_positions


@dataclass(frozen=True, slots=True)
class SideMetrics:
    """Accuracy summary for one side of the board."""

    accuracy: float
    acpl: float
    blunders: int = 0
    mistakes: int = 0
    inaccuracies: int = 0

    def __composite_values__(self) -> tuple[float, float, int, int, int]:
        return (self.accuracy, self.acpl, self.blunders, self.mistakes, self.inaccuracies)


@dataclass(frozen=True, slots=True, kw_only=True)
class EvaluationResult:
    """What the evaluation collaborator reports for a finished game."""

    white: SideMetrics
    black: SideMetrics
    depth: int
    total_positions: int
    engine_version: str | None = None


@dataclass(eq=False, kw_only=True)
class GameEvaluation(Entity):
    """Stored outcome of a completed job."""

    game_id: UUID
    job_id: UUID
    depth: int
    white: SideMetrics
    black: SideMetrics
    total_positions: int = 0
    engine_version: str | None = None
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_result(cls, job: EvaluationJob, result: EvaluationResult) -> GameEvaluation:
        return cls(
            game_id=job.game_id,
            job_id=job.id,
            depth=result.depth,
            white=result.white,
            black=result.black,
            total_positions=result.total_positions,
            engine_version=result.engine_version,
        )
