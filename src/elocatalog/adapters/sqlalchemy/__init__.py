"""SQLAlchemy adapter package for the catalog."""

from __future__ import annotations

from .mappings import ACTIVE_JOB_INDEX, create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyEvaluationRepository,
    SqlAlchemyGameRepository,
    SqlAlchemyJobRepository,
    SqlAlchemyUserRepository,
)
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "ACTIVE_JOB_INDEX",
    "SqlAlchemyEvaluationRepository",
    "SqlAlchemyGameRepository",
    "SqlAlchemyJobRepository",
    "SqlAlchemyUnitOfWork",
    "SqlAlchemyUserRepository",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "startup",
]
