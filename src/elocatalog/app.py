"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from elocatalog.adapters.chesscom import ChessComFetcher
from elocatalog.adapters.evaluation import HttpEvaluator
from elocatalog.adapters.lichess import LichessFetcher
from elocatalog.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from elocatalog.config import get_catalog_config
from elocatalog.config.errors import ConfigurationError
from elocatalog.domain import catalog, evaluation
from elocatalog.domain.model import Source

if TYPE_CHECKING:
    from uuid import UUID

    from elocatalog.domain.catalog import GameFilters, GameListing, ImportReport, SyncReport
    from elocatalog.domain.model import EvaluationJob, ExternalRecord, JobStatus, User
    from elocatalog.domain.ports import CatalogUnitOfWork, Evaluator, GameFetcher

UnitOfWorkFactory = Callable[[], "CatalogUnitOfWork"]

log = getLogger(__name__)


def _unit_of_work(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


def build_fetchers() -> tuple[dict[Source, GameFetcher], dict[Source, float]]:
    """Archive fetchers with their per-source deadlines.

    A source whose configuration is incomplete is left out with a warning, so a
    missing Chess.com user agent does not block Lichess listings.
    """

    fetchers: dict[Source, GameFetcher] = {}
    deadlines: dict[Source, float] = {}
    try:
        chesscom = ChessComFetcher()
    except ConfigurationError as exc:
        log.warning("Chess.com disabled: %s", exc)
    else:
        fetchers[Source.CHESSCOM] = chesscom
        deadlines[Source.CHESSCOM] = chesscom.config.deadline_seconds
    lichess = LichessFetcher()
    fetchers[Source.LICHESS] = lichess
    deadlines[Source.LICHESS] = lichess.config.deadline_seconds
    return fetchers, deadlines


def create_user(
    *,
    display_name: str,
    email: str | None = None,
    chesscom_username: str | None = None,
    lichess_username: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> User:
    return catalog.create_user(
        display_name=display_name,
        email=email,
        chesscom_username=chesscom_username,
        lichess_username=lichess_username,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
    )


def list_games(
    user_id: UUID,
    filters: GameFilters | None = None,
    *,
    fetchers: dict[Source, GameFetcher] | None = None,
    deadlines: dict[Source, float] | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> GameListing:
    """List the user's unified games across every linked archive and manual imports."""

    effective_uow = _unit_of_work(unit_of_work_factory)
    if fetchers is None:
        fetchers, default_deadlines = build_fetchers()
        deadlines = deadlines or default_deadlines
    return catalog.list_unified_games(
        user_id,
        filters,
        fetchers=fetchers,
        unit_of_work_factory=effective_uow,
        deadlines=deadlines,
        config=get_catalog_config(),
    )


def import_games(
    user_id: UUID,
    text: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ImportReport:
    log.info("Starting manual import for user %s: %s characters", user_id, len(text))
    report = catalog.import_batch(
        user_id,
        text,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
        config=get_catalog_config(),
    )
    log.info(
        "Finished manual import: accepted=%s, rejected=%s",
        report.accepted,
        report.rejected,
    )
    return report


def save_game(
    user_id: UUID,
    record: ExternalRecord,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> UUID:
    return catalog.save_external_game(
        user_id,
        record,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
    )


def sync_games(
    user_id: UUID,
    *,
    limit: int | None = None,
    fetchers: dict[Source, GameFetcher] | None = None,
    deadlines: dict[Source, float] | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> SyncReport:
    """Persist every archive game of ``user_id`` the catalog has not seen yet."""

    effective_uow = _unit_of_work(unit_of_work_factory)
    if fetchers is None:
        fetchers, default_deadlines = build_fetchers()
        deadlines = deadlines or default_deadlines
    config = get_catalog_config()
    result = catalog.sync_external_games(
        user_id,
        fetchers=fetchers,
        unit_of_work_factory=effective_uow,
        limit=limit or config.page_size,
        deadlines=deadlines,
        config=config,
    )
    log.info(
        f"Finished archive sync: fetched={result.fetched}, stored={result.stored}, "
        f"skipped={result.skipped}, warnings={sorted(result.warnings)}"
    )
    return result


def request_evaluation(
    game_id: UUID,
    *,
    depth: int | None = None,
    priority: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> UUID:
    """Queue an evaluation for ``game_id`` and return the new job id."""

    job = evaluation.create_job(
        game_id,
        depth=depth,
        priority=priority,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
        config=get_catalog_config(),
    )
    return job.id


def adjust_priority(
    job_id: UUID,
    delta: int,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> EvaluationJob:
    return evaluation.adjust_priority(
        job_id,
        delta,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
        config=get_catalog_config(),
    )


def cancel_evaluation(
    job_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> EvaluationJob:
    return evaluation.cancel_job(job_id, unit_of_work_factory=_unit_of_work(unit_of_work_factory))


def retry_evaluation(
    job_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> EvaluationJob:
    return evaluation.retry_job(job_id, unit_of_work_factory=_unit_of_work(unit_of_work_factory))


def run_evaluation(
    job_id: UUID,
    *,
    evaluator: Evaluator | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> EvaluationJob:
    """Drive one queued job through the remote evaluation service."""

    job = evaluation.run_evaluation(
        job_id,
        evaluator=evaluator or HttpEvaluator(),
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
    )
    log.info("Evaluation job %s finished as %s", job.id, job.status)
    return job


def list_evaluation_jobs(
    *,
    status: JobStatus | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[EvaluationJob]:
    return evaluation.list_jobs(
        status=status,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
    )
