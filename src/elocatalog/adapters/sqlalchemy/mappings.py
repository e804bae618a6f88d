"""SQLAlchemy mapping metadata for the catalog domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from enum import StrEnum
from functools import cache
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
    text,
)
from sqlalchemy.orm import composite, configure_mappers

from elocatalog.domain.model import (
    EvaluationJob,
    EvaluationStatus,
    GameEvaluation,
    GameResult,
    JobStatus,
    PersistedGame,
    SideMetrics,
    Source,
    User,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]

ACTIVE_JOB_INDEX: Final[str] = "uq_evaluation_jobs_active_game"
_ACTIVE_JOB_WHERE: Final[str] = "status IN ('queued', 'running')"


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _value_enum(enum_cls: type[StrEnum]) -> Enum:
    """Store enum values (``"chess.com"``), not member names."""

    return Enum(
        enum_cls,
        native_enum=False,
        values_callable=lambda members: [member.value for member in members],
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

user_table = Table(
    "users",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("display_name", String, nullable=False),
    Column("email", String, nullable=True),
    Column("chesscom_username", String, nullable=True),
    Column("lichess_username", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=True),
)

game_table = Table(
    "games",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("user_id", UUIDColumnType, ForeignKey("users.id"), nullable=False),
    Column("source", _value_enum(Source), nullable=False),
    Column("external_id", String, nullable=True),
    Column("moves", Text, nullable=False),
    Column("white_player", String, nullable=False),
    Column("black_player", String, nullable=False),
    Column("white_rating", Integer, nullable=True),
    Column("black_rating", Integer, nullable=True),
    Column("result", _value_enum(GameResult), nullable=False),
    Column("time_control", String, nullable=True),
    Column("opening_name", String, nullable=True),
    Column("played_at", UTCDateTime(), nullable=False),
    Column("evaluation_status", _value_enum(EvaluationStatus), nullable=False),
    Column("evaluation_requested_at", UTCDateTime(), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=True),
    UniqueConstraint("user_id", "source", "external_id", name="uq_games_user_source_external"),
    Index("ix_games_user_played_at", "user_id", "played_at"),
)

evaluation_job_table = Table(
    "evaluation_jobs",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("game_id", UUIDColumnType, ForeignKey("games.id"), nullable=False),
    Column("status", _value_enum(JobStatus), nullable=False),
    Column("priority", Integer, nullable=False),
    Column("depth", Integer, nullable=False),
    Column("analyzed_positions", Integer, nullable=False, default=0),
    Column("total_positions", Integer, nullable=False, default=0),
    Column("error_message", Text, nullable=True),
    Column("retry_count", Integer, nullable=False, default=0),
    Column("started_at", UTCDateTime(), nullable=True),
    Column("completed_at", UTCDateTime(), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=True),
    Index("ix_evaluation_jobs_game_created", "game_id", "created_at"),
    Index("ix_evaluation_jobs_status_priority", "status", "priority"),
    # at most one queued/running job per game
    Index(
        ACTIVE_JOB_INDEX,
        "game_id",
        unique=True,
        sqlite_where=text(_ACTIVE_JOB_WHERE),
        postgresql_where=text(_ACTIVE_JOB_WHERE),
    ),
)

game_evaluation_table = Table(
    "game_evaluations",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("game_id", UUIDColumnType, ForeignKey("games.id"), nullable=False),
    Column("job_id", UUIDColumnType, ForeignKey("evaluation_jobs.id"), nullable=False),
    Column("depth", Integer, nullable=False),
    Column("total_positions", Integer, nullable=False, default=0),
    Column("engine_version", String, nullable=True),
    Column("white_accuracy", Float, nullable=False),
    Column("white_acpl", Float, nullable=False),
    Column("white_blunders", Integer, nullable=False),
    Column("white_mistakes", Integer, nullable=False),
    Column("white_inaccuracies", Integer, nullable=False),
    Column("black_accuracy", Float, nullable=False),
    Column("black_acpl", Float, nullable=False),
    Column("black_blunders", Integer, nullable=False),
    Column("black_mistakes", Integer, nullable=False),
    Column("black_inaccuracies", Integer, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_game_evaluations_game_created", "game_id", "created_at"),
)


def _side_metrics(table: Table, side: str) -> orm.Composite[SideMetrics]:
    return composite(
        SideMetrics,
        table.c[f"{side}_accuracy"],
        table.c[f"{side}_acpl"],
        table.c[f"{side}_blunders"],
        table.c[f"{side}_mistakes"],
        table.c[f"{side}_inaccuracies"],
    )


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(User, user_table)
    mapper_registry.map_imperatively(PersistedGame, game_table)
    mapper_registry.map_imperatively(EvaluationJob, evaluation_job_table)
    mapper_registry.map_imperatively(
        GameEvaluation,
        game_evaluation_table,
        properties={
            "white": _side_metrics(game_evaluation_table, "white"),
            "black": _side_metrics(game_evaluation_table, "black"),
        },
    )

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
