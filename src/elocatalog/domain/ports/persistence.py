"""Ports for persisting catalog aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from elocatalog.domain.model import EvaluationJob, GameEvaluation, PersistedGame, User

if TYPE_CHECKING:
    from collections.abc import Mapping
    from uuid import UUID

    from elocatalog.domain.model import EvaluationStatus, JobStatus, Source


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...

    def get(self, entity_id: UUID) -> TEntity | None: ...


@runtime_checkable
class UserRepository(Repository[User], Protocol):
    """Repository contract for users."""


@runtime_checkable
class GameRepository(Repository[PersistedGame], Protocol):
    """Persistence contract for catalog games."""

    def list_for_user(self, user_id: UUID) -> list[PersistedGame]: ...

    def find_by_external_id(
        self, *, user_id: UUID, source: Source, external_id: str
    ) -> PersistedGame | None: ...

    def set_status(
        self,
        game_id: UUID,
        status: EvaluationStatus,
        *,
        requested: bool = False,
    ) -> None:
        """Write the evaluation status of one game inside the current transaction."""
        ...


@runtime_checkable
class JobRepository(Repository[EvaluationJob], Protocol):
    """Persistence contract for evaluation jobs.

    ``compare_and_set`` is the only way a stored job changes: it applies
    ``changes`` iff the stored status still equals ``expected`` and reports
    whether it did. Status moves are expressed as a ``status`` key in ``changes``.
    """

    def latest_for_game(self, game_id: UUID) -> EvaluationJob | None: ...

    def list_by_priority(self, *, status: JobStatus | None = None) -> list[EvaluationJob]:
        """Jobs ordered by priority (highest first), then newest first."""
        ...

    def compare_and_set(
        self,
        job_id: UUID,
        *,
        expected: JobStatus,
        changes: Mapping[str, Any],
    ) -> bool: ...


@runtime_checkable
class EvaluationRepository(Repository[GameEvaluation], Protocol):
    """Persistence contract for stored evaluation metrics."""

    def latest_for_game(self, game_id: UUID) -> GameEvaluation | None: ...


__all__ = [
    "EvaluationRepository",
    "GameRepository",
    "JobRepository",
    "Repository",
    "UserRepository",
]
