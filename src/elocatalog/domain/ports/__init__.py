"""Domain port definitions for adapters."""

from __future__ import annotations

from .evaluation import Evaluator, ProgressCallback
from .fetching import GameFetcher
from .persistence import (
    EvaluationRepository,
    GameRepository,
    JobRepository,
    Repository,
    UserRepository,
)
from .unit_of_work import CatalogRepositories, CatalogUnitOfWork

__all__ = [
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "EvaluationRepository",
    "Evaluator",
    "GameFetcher",
    "GameRepository",
    "JobRepository",
    "ProgressCallback",
    "Repository",
    "UserRepository",
]
