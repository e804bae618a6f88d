"""SQLAlchemy-backed unit of work for the catalog.

The adapter owns one engine per process. ``startup`` binds it (running the
migrations first) and every ``SqlAlchemyUnitOfWork`` opens a fresh session on
it; ``shutdown`` disposes it again.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from elocatalog.adapters.sqlalchemy.mappings import start_mappers
from elocatalog.adapters.sqlalchemy.migrations import upgrade_head
from elocatalog.adapters.sqlalchemy.repositories import (
    SqlAlchemyEvaluationRepository,
    SqlAlchemyGameRepository,
    SqlAlchemyJobRepository,
    SqlAlchemyUserRepository,
)
from elocatalog.config.storage import get_database_uri
from elocatalog.domain.errors import ConflictError, InternalError
from elocatalog.domain.ports.unit_of_work import CatalogRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the storage adapter is used before ``startup`` or reconfigured by accident."""


@dataclass(slots=True)
class _Storage:
    engine: Engine | None = None
    sessions: sessionmaker[Session] | None = None

    def bind(self, engine: Engine | None) -> None:
        self.engine = engine
        self.sessions = (
            sessionmaker(bind=engine, expire_on_commit=False) if engine is not None else None
        )

    def session_factory(self) -> sessionmaker[Session]:
        if self.sessions is None:
            raise StartupError(
                "Storage not initialised; call "
                "elocatalog.adapters.sqlalchemy.unit_of_work.startup() first."
            )
        return self.sessions


_STORAGE = _Storage()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to ``engine`` (or a new one for ``database_uri``) and migrate it."""

    if _STORAGE.engine is not None and not force:
        raise StartupError("Storage already initialised. Pass force=True to reconfigure.")

    resolved = engine or create_engine(database_uri or get_database_uri(), future=True)
    start_mappers()
    upgrade_head(engine=resolved)
    _STORAGE.bind(resolved)
    log.info("Storage ready at %s", resolved.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _STORAGE.engine


def is_started() -> bool:
    return _STORAGE.engine is not None


def shutdown() -> None:
    """Dispose the bound engine, if any."""

    if _STORAGE.engine is not None:
        _STORAGE.engine.dispose()
    _STORAGE.bind(None)


class SqlAlchemyUnitOfWork:
    """Unit of work over users, games, jobs and evaluations.

    Leaving the block without ``commit`` discards the work. Storage failures
    leave it as catalog errors: a violated constraint becomes ``ConflictError``,
    anything else ``InternalError``.
    """

    def __init__(self) -> None:
        self._sessions = _STORAGE.session_factory()
        self._session: Session | None = None
        self._repositories: CatalogRepositories | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work already entered")
        session = self._sessions()
        self._session = session
        self._repositories = CatalogRepositories(
            users=SqlAlchemyUserRepository(session),
            games=SqlAlchemyGameRepository(session),
            jobs=SqlAlchemyJobRepository(session),
            evaluations=SqlAlchemyEvaluationRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None

        if isinstance(exc_value, IntegrityError):
            raise ConflictError(f"storage constraint violated: {exc_value.orig}") from exc_value
        if isinstance(exc_value, SQLAlchemyError):
            log.error("Storage failure: %s", exc_value)
            raise InternalError("storage failure") from exc_value
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work used outside its with-block")
        return self._session

    @property
    def repositories(self) -> CatalogRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work used outside its with-block")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from elocatalog.domain.ports.unit_of_work import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyUnitOfWork()
