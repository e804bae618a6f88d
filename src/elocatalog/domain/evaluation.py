"""Evaluation job lifecycle.

A job walks ``queued -> running -> completed | failed``; ``queued`` and
``running`` jobs may be cancelled and ``failed`` jobs retried. Every status move
is a compare-and-set on the stored job, and the target game's evaluation status
is rewritten in the same unit of work, so readers never see the two disagree.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING, Any

from elocatalog.config.catalog import CatalogConfig
from elocatalog.domain.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from elocatalog.domain.model import (
    GAME_STATUS_FOR_JOB,
    EvaluationJob,
    EvaluationStatus,
    GameEvaluation,
    JobStatus,
    can_move_game,
    can_transition,
    utcnow,
)

if TYPE_CHECKING:
    from uuid import UUID

    from elocatalog.domain.model import EvaluationResult
    from elocatalog.domain.ports import CatalogRepositories, CatalogUnitOfWork, Evaluator

UnitOfWorkFactory = Callable[[], "CatalogUnitOfWork"]

log = getLogger(__name__)

_DEFAULT_CONFIG = CatalogConfig()


def _require_job(repositories: CatalogRepositories, job_id: UUID) -> EvaluationJob:
    job = repositories.jobs.get(job_id)
    if job is None:
        raise NotFoundError("job", job_id)
    return job


def _reject(job: EvaluationJob, action: str) -> ValidationError | ConflictError:
    if job.status.is_terminal:
        return ConflictError(f"Cannot {action} job {job.id}: already terminal ({job.status})")
    return ValidationError(f"Cannot {action} job {job.id} while {job.status}")


def _check_priority(priority: int, config: CatalogConfig) -> None:
    if not config.min_priority <= priority <= config.max_priority:
        raise ValidationError(
            f"Priority must be between {config.min_priority} and {config.max_priority}, "
            f"got {priority}"
        )


def _sync_game_status(
    repositories: CatalogRepositories,
    game_id: UUID,
    status: EvaluationStatus,
    *,
    requested: bool = False,
) -> None:
    game = repositories.games.get(game_id)
    if game is None:
        raise InternalError(f"Job references missing game {game_id}")
    if game.evaluation_status is EvaluationStatus.COMPLETED:
        # a stored evaluation stays valid while a newer one is queued, fails or is cancelled
        status = EvaluationStatus.COMPLETED
    elif not can_move_game(game.evaluation_status, status):
        raise ConflictError(
            f"Game {game_id} cannot move from {game.evaluation_status} to {status}"
        )
    repositories.games.set_status(game_id, status, requested=requested)


def _transition(
    uow: CatalogUnitOfWork,
    job: EvaluationJob,
    target: JobStatus,
    *,
    action: str,
    changes: dict[str, Any] | None = None,
) -> EvaluationJob:
    """Move ``job`` to ``target`` and mirror the move onto its game; commits."""

    if not can_transition(job.status, target):
        raise _reject(job, action)

    repositories = uow.repositories
    previous = job.status
    values: dict[str, Any] = {"status": target, "updated_at": utcnow()}
    if changes:
        values.update(changes)
    if not repositories.jobs.compare_and_set(job.id, expected=previous, changes=values):
        raise ConflictError(f"Job {job.id} changed concurrently; {action} rejected")

    _sync_game_status(
        repositories,
        job.game_id,
        GAME_STATUS_FOR_JOB[target],
        requested=target is JobStatus.QUEUED,
    )
    uow.commit()
    log.info("Job %s: %s -> %s", job.id, previous, target)
    return _require_job(repositories, job.id)


def get_job(job_id: UUID, *, unit_of_work_factory: UnitOfWorkFactory) -> EvaluationJob:
    with unit_of_work_factory() as uow:
        return _require_job(uow.repositories, job_id)


def list_jobs(
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    status: JobStatus | None = None,
) -> list[EvaluationJob]:
    """Jobs ordered by priority (highest first), then newest first."""

    with unit_of_work_factory() as uow:
        return uow.repositories.jobs.list_by_priority(status=status)


def create_job(
    game_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    depth: int | None = None,
    priority: int | None = None,
    config: CatalogConfig = _DEFAULT_CONFIG,
) -> EvaluationJob:
    """Queue a new evaluation for ``game_id``.

    Fails with ``ConflictError`` while the game's latest job is not terminal
    (a failed job has to be retried instead).
    """

    effective_depth = config.default_depth if depth is None else depth
    effective_priority = config.default_priority if priority is None else priority
    if effective_depth < 1:
        raise ValidationError(f"Depth must be positive, got {effective_depth}")
    _check_priority(effective_priority, config)

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        if repositories.games.get(game_id) is None:
            raise NotFoundError("game", game_id)

        latest = repositories.jobs.latest_for_game(game_id)
        if latest is not None and not latest.status.is_terminal:
            raise ConflictError(
                f"Game {game_id} already has a {latest.status} evaluation job ({latest.id})"
            )

        job = EvaluationJob(game_id=game_id, depth=effective_depth, priority=effective_priority)
        repositories.jobs.add(job)
        _sync_game_status(repositories, game_id, EvaluationStatus.QUEUED, requested=True)
        uow.commit()

    log.info(
        "Queued job %s for game %s (depth=%s, priority=%s)",
        job.id,
        game_id,
        job.depth,
        job.priority,
    )
    return job


def start_job(job_id: UUID, *, unit_of_work_factory: UnitOfWorkFactory) -> EvaluationJob:
    with unit_of_work_factory() as uow:
        job = _require_job(uow.repositories, job_id)
        return _transition(
            uow,
            job,
            JobStatus.RUNNING,
            action="start",
            changes={"started_at": utcnow()},
        )


def set_priority(
    job_id: UUID,
    priority: int,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    config: CatalogConfig = _DEFAULT_CONFIG,
) -> EvaluationJob:
    """Set an absolute priority; out-of-range values are rejected, never clamped."""

    with unit_of_work_factory() as uow:
        job = _require_job(uow.repositories, job_id)
        return _apply_priority(uow, job, priority, config)


def adjust_priority(
    job_id: UUID,
    delta: int,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    config: CatalogConfig = _DEFAULT_CONFIG,
) -> EvaluationJob:
    with unit_of_work_factory() as uow:
        job = _require_job(uow.repositories, job_id)
        return _apply_priority(uow, job, job.priority + delta, config)


def _apply_priority(
    uow: CatalogUnitOfWork,
    job: EvaluationJob,
    priority: int,
    config: CatalogConfig,
) -> EvaluationJob:
    if job.status is not JobStatus.QUEUED:
        raise ValidationError(f"Priority of job {job.id} is fixed once {job.status}")
    _check_priority(priority, config)

    repositories = uow.repositories
    previous = job.priority
    changes = {"priority": priority, "updated_at": utcnow()}
    if not repositories.jobs.compare_and_set(job.id, expected=JobStatus.QUEUED, changes=changes):
        raise ConflictError(f"Job {job.id} left the queue before its priority changed")
    uow.commit()
    log.info("Job %s priority %s -> %s", job.id, previous, priority)
    return _require_job(repositories, job.id)


def cancel_job(job_id: UUID, *, unit_of_work_factory: UnitOfWorkFactory) -> EvaluationJob:
    """Cancel a queued or running job; progress is kept for audit."""

    with unit_of_work_factory() as uow:
        job = _require_job(uow.repositories, job_id)
        return _transition(
            uow,
            job,
            JobStatus.CANCELLED,
            action="cancel",
            changes={"completed_at": utcnow()},
        )


def retry_job(job_id: UUID, *, unit_of_work_factory: UnitOfWorkFactory) -> EvaluationJob:
    """Put a failed job back in the queue with fresh counters."""

    with unit_of_work_factory() as uow:
        job = _require_job(uow.repositories, job_id)
        if job.status is not JobStatus.FAILED:
            raise ValidationError(f"Only failed jobs can be retried; job {job.id} is {job.status}")
        return _transition(
            uow,
            job,
            JobStatus.QUEUED,
            action="retry",
            changes={
                "retry_count": job.retry_count + 1,
                "error_message": None,
                "analyzed_positions": 0,
                "total_positions": 0,
                "started_at": None,
                "completed_at": None,
            },
        )


def report_progress(
    job_id: UUID,
    *,
    analyzed: int,
    total: int,
    unit_of_work_factory: UnitOfWorkFactory,
) -> EvaluationJob:
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        job = _require_job(repositories, job_id)
        if job.status is not JobStatus.RUNNING:
            raise _reject(job, "report progress for")
        if analyzed < job.analyzed_positions:
            raise ValidationError(
                f"Progress of job {job.id} cannot go back from "
                f"{job.analyzed_positions} to {analyzed}"
            )
        if total < 0 or analyzed > total:
            raise ValidationError(f"Invalid progress {analyzed}/{total} for job {job.id}")

        changes = {
            "analyzed_positions": analyzed,
            "total_positions": total,
            "updated_at": utcnow(),
        }
        if not repositories.jobs.compare_and_set(
            job.id, expected=JobStatus.RUNNING, changes=changes
        ):
            raise ConflictError(f"Job {job.id} stopped running before progress was recorded")
        uow.commit()
        return _require_job(repositories, job.id)


def complete_job(
    job_id: UUID,
    result: EvaluationResult,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> EvaluationJob:
    """Finish a running job, store its metrics and mark the game completed."""

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        job = _require_job(repositories, job_id)
        if job.status is JobStatus.RUNNING:
            repositories.evaluations.add(GameEvaluation.from_result(job, result))
        total = max(result.total_positions, job.total_positions)
        return _transition(
            uow,
            job,
            JobStatus.COMPLETED,
            action="complete",
            changes={
                "analyzed_positions": total,
                "total_positions": total,
                "completed_at": utcnow(),
            },
        )


def fail_job(
    job_id: UUID,
    error: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> EvaluationJob:
    with unit_of_work_factory() as uow:
        job = _require_job(uow.repositories, job_id)
        return _transition(
            uow,
            job,
            JobStatus.FAILED,
            action="fail",
            changes={"error_message": error, "completed_at": utcnow()},
        )


def run_evaluation(
    job_id: UUID,
    *,
    evaluator: Evaluator,
    unit_of_work_factory: UnitOfWorkFactory,
) -> EvaluationJob:
    """Start a queued job and drive the remote evaluation to a terminal state.

    Progress and results that arrive after the job was cancelled are dropped.
    """

    job = start_job(job_id, unit_of_work_factory=unit_of_work_factory)
    with unit_of_work_factory() as uow:
        game = uow.repositories.games.get(job.game_id)
        if game is None:
            raise InternalError(f"Job references missing game {job.game_id}")
        moves = game.moves

    def on_progress(analyzed: int, total: int) -> None:
        try:
            report_progress(
                job_id,
                analyzed=analyzed,
                total=total,
                unit_of_work_factory=unit_of_work_factory,
            )
        except ConflictError:
            log.info("Ignoring progress %s/%s for job %s: not running", analyzed, total, job_id)
        except ValidationError as exc:
            log.warning("Ignoring progress for job %s: %s", job_id, exc)

    try:
        result = evaluator.evaluate_stream(
            game_id=job.game_id,
            moves=moves,
            depth=job.depth,
            on_progress=on_progress,
        )
    except UpstreamError as exc:
        log.warning("Evaluation of job %s failed: %s", job_id, exc)
        return _finish_unless_cancelled(
            job_id,
            unit_of_work_factory,
            partial(fail_job, job_id, str(exc), unit_of_work_factory=unit_of_work_factory),
        )

    return _finish_unless_cancelled(
        job_id,
        unit_of_work_factory,
        partial(complete_job, job_id, result, unit_of_work_factory=unit_of_work_factory),
    )


def _finish_unless_cancelled(
    job_id: UUID,
    unit_of_work_factory: UnitOfWorkFactory,
    finish: Callable[[], EvaluationJob],
) -> EvaluationJob:
    try:
        return finish()
    except ConflictError:
        current = get_job(job_id, unit_of_work_factory=unit_of_work_factory)
        if current.status is not JobStatus.CANCELLED:
            raise
        log.info("Dropping late evaluation outcome for cancelled job %s", job_id)
        return current


__all__ = [
    "adjust_priority",
    "cancel_job",
    "complete_job",
    "create_job",
    "fail_job",
    "get_job",
    "list_jobs",
    "report_progress",
    "retry_job",
    "run_evaluation",
    "set_priority",
    "start_job",
]
