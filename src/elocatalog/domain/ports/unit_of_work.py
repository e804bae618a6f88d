"""Transaction boundary shared by the catalog and the job lifecycle."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from elocatalog.domain.ports.persistence import (
        EvaluationRepository,
        GameRepository,
        JobRepository,
        UserRepository,
    )


@dataclass(frozen=True, slots=True)
class CatalogRepositories:
    users: UserRepository
    games: GameRepository
    jobs: JobRepository
    evaluations: EvaluationRepository


@runtime_checkable
class CatalogUnitOfWork(Protocol):
    """One transaction over the catalog repositories.

    Work that is not committed before the block exits is rolled back.
    """

    @property
    def repositories(self) -> CatalogRepositories: ...

    def __enter__(self) -> CatalogUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


__all__ = ["CatalogRepositories", "CatalogUnitOfWork"]
