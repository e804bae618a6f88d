"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import CursorResult, select, update

from elocatalog.adapters.sqlalchemy.mappings import (
    evaluation_job_table,
    game_evaluation_table,
    game_table,
)
from elocatalog.domain.model import (
    EvaluationJob,
    GameEvaluation,
    PersistedGame,
    User,
    utcnow,
)

if TYPE_CHECKING:
    import uuid
    from collections.abc import Mapping

    from sqlalchemy.orm import Session

    from elocatalog.domain.model import EvaluationStatus, JobStatus, Source


class SqlAlchemyRepository[TEntity]:
    """Shared add/get for aggregates keyed by their UUID."""

    def __init__(self, session: Session, entity_cls: type[TEntity]) -> None:
        self.session = session
        self._entity_cls = entity_cls

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)

    def get(self, entity_id: uuid.UUID) -> TEntity | None:
        return self.session.get(self._entity_cls, entity_id)


class SqlAlchemyUserRepository(SqlAlchemyRepository[User]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, User)


class SqlAlchemyGameRepository(SqlAlchemyRepository[PersistedGame]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, PersistedGame)

    def list_for_user(self, user_id: uuid.UUID) -> list[PersistedGame]:
        stmt = (
            select(PersistedGame)
            .where(game_table.c.user_id == user_id)
            .order_by(game_table.c.played_at.desc(), game_table.c.created_at)
        )
        return list(self.session.execute(stmt).scalars())

    def find_by_external_id(
        self,
        *,
        user_id: uuid.UUID,
        source: Source,
        external_id: str,
    ) -> PersistedGame | None:
        stmt = (
            select(PersistedGame)
            .where(game_table.c.user_id == user_id)
            .where(game_table.c.source == source)
            .where(game_table.c.external_id == external_id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def set_status(
        self,
        game_id: uuid.UUID,
        status: EvaluationStatus,
        *,
        requested: bool = False,
    ) -> None:
        game = self.session.get(PersistedGame, game_id)
        if game is None:
            return
        now = utcnow()
        game.evaluation_status = status
        game.updated_at = now
        if requested:
            game.evaluation_requested_at = now


class SqlAlchemyJobRepository(SqlAlchemyRepository[EvaluationJob]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, EvaluationJob)

    def latest_for_game(self, game_id: uuid.UUID) -> EvaluationJob | None:
        stmt = (
            select(EvaluationJob)
            .where(evaluation_job_table.c.game_id == game_id)
            .order_by(evaluation_job_table.c.created_at.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_by_priority(self, *, status: JobStatus | None = None) -> list[EvaluationJob]:
        stmt = select(EvaluationJob).order_by(
            evaluation_job_table.c.priority.desc(),
            evaluation_job_table.c.created_at.desc(),
        )
        if status is not None:
            stmt = stmt.where(evaluation_job_table.c.status == status)
        return list(self.session.execute(stmt).scalars())

    def compare_and_set(
        self,
        job_id: uuid.UUID,
        *,
        expected: JobStatus,
        changes: Mapping[str, Any],
    ) -> bool:
        """``UPDATE ... WHERE id = :id AND status = :expected``; the row count decides."""

        self.session.flush()
        stmt = (
            update(evaluation_job_table)
            .where(evaluation_job_table.c.id == job_id)
            .where(evaluation_job_table.c.status == expected)
            .values(**changes)
        )
        result = cast("CursorResult[Any]", self.session.execute(stmt))
        if result.rowcount != 1:
            return False
        self.session.get(EvaluationJob, job_id, populate_existing=True)
        return True


class SqlAlchemyEvaluationRepository(SqlAlchemyRepository[GameEvaluation]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, GameEvaluation)

    def latest_for_game(self, game_id: uuid.UUID) -> GameEvaluation | None:
        stmt = (
            select(GameEvaluation)
            .where(game_evaluation_table.c.game_id == game_id)
            .order_by(game_evaluation_table.c.created_at.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()
