"""Initial catalog schema.

Revision ID: 0001
Revises:
Create Date: 2026-09-28 10:12:00
"""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

_ACTIVE_JOB_WHERE = sa.text("status IN ('queued', 'running')")


def _timestamp(name: str, *, nullable: bool) -> sa.Column[datetime]:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("chesscom_username", sa.String(), nullable=True),
        sa.Column("lichess_username", sa.String(), nullable=True),
        _timestamp("created_at", nullable=False),
        _timestamp("updated_at", nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_table(
        "games",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("source", sa.String(length=9), nullable=False),
        sa.Column("external_id", sa.String(), nullable=True),
        sa.Column("moves", sa.Text(), nullable=False),
        sa.Column("white_player", sa.String(), nullable=False),
        sa.Column("black_player", sa.String(), nullable=False),
        sa.Column("white_rating", sa.Integer(), nullable=True),
        sa.Column("black_rating", sa.Integer(), nullable=True),
        sa.Column("result", sa.String(length=7), nullable=False),
        sa.Column("time_control", sa.String(), nullable=True),
        sa.Column("opening_name", sa.String(), nullable=True),
        _timestamp("played_at", nullable=False),
        sa.Column("evaluation_status", sa.String(length=10), nullable=False),
        _timestamp("evaluation_requested_at", nullable=True),
        _timestamp("created_at", nullable=False),
        _timestamp("updated_at", nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_games_user_id_users"),
        sa.PrimaryKeyConstraint("id", name="pk_games"),
        sa.UniqueConstraint(
            "user_id", "source", "external_id", name="uq_games_user_source_external"
        ),
    )
    op.create_index("ix_games_user_played_at", "games", ["user_id", "played_at"])

    op.create_table(
        "evaluation_jobs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("game_id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(length=9), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("depth", sa.Integer(), nullable=False),
        sa.Column("analyzed_positions", sa.Integer(), nullable=False),
        sa.Column("total_positions", sa.Integer(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("retry_count", sa.Integer(), nullable=False),
        _timestamp("started_at", nullable=True),
        _timestamp("completed_at", nullable=True),
        _timestamp("created_at", nullable=False),
        _timestamp("updated_at", nullable=True),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"], name="fk_evaluation_jobs_game_id_games"),
        sa.PrimaryKeyConstraint("id", name="pk_evaluation_jobs"),
    )
    op.create_index(
        "ix_evaluation_jobs_game_created", "evaluation_jobs", ["game_id", "created_at"]
    )
    op.create_index(
        "ix_evaluation_jobs_status_priority", "evaluation_jobs", ["status", "priority"]
    )
    op.create_index(
        "uq_evaluation_jobs_active_game",
        "evaluation_jobs",
        ["game_id"],
        unique=True,
        sqlite_where=_ACTIVE_JOB_WHERE,
        postgresql_where=_ACTIVE_JOB_WHERE,
    )

    op.create_table(
        "game_evaluations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("game_id", sa.Uuid(), nullable=False),
        sa.Column("job_id", sa.Uuid(), nullable=False),
        sa.Column("depth", sa.Integer(), nullable=False),
        sa.Column("total_positions", sa.Integer(), nullable=False),
        sa.Column("engine_version", sa.String(), nullable=True),
        sa.Column("white_accuracy", sa.Float(), nullable=False),
        sa.Column("white_acpl", sa.Float(), nullable=False),
        sa.Column("white_blunders", sa.Integer(), nullable=False),
        sa.Column("white_mistakes", sa.Integer(), nullable=False),
        sa.Column("white_inaccuracies", sa.Integer(), nullable=False),
        sa.Column("black_accuracy", sa.Float(), nullable=False),
        sa.Column("black_acpl", sa.Float(), nullable=False),
        sa.Column("black_blunders", sa.Integer(), nullable=False),
        sa.Column("black_mistakes", sa.Integer(), nullable=False),
        sa.Column("black_inaccuracies", sa.Integer(), nullable=False),
        _timestamp("created_at", nullable=False),
        sa.ForeignKeyConstraint(
            ["game_id"], ["games.id"], name="fk_game_evaluations_game_id_games"
        ),
        sa.ForeignKeyConstraint(
            ["job_id"], ["evaluation_jobs.id"], name="fk_game_evaluations_job_id_evaluation_jobs"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_game_evaluations"),
    )
    op.create_index(
        "ix_game_evaluations_game_created", "game_evaluations", ["game_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_game_evaluations_game_created", table_name="game_evaluations")
    op.drop_table("game_evaluations")
    op.drop_index("uq_evaluation_jobs_active_game", table_name="evaluation_jobs")
    op.drop_index("ix_evaluation_jobs_status_priority", table_name="evaluation_jobs")
    op.drop_index("ix_evaluation_jobs_game_created", table_name="evaluation_jobs")
    op.drop_table("evaluation_jobs")
    op.drop_index("ix_games_user_played_at", table_name="games")
    op.drop_table("games")
    op.drop_table("users")
