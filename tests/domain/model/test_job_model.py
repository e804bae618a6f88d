from __future__ import annotations

import pytest

from elocatalog.domain.model import (
    GAME_STATUS_FOR_JOB,
    EvaluationJob,
    EvaluationStatus,
    GameResult,
    JobStatus,
    Source,
    can_move_game,
    can_transition,
    new_id,
)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (JobStatus.QUEUED, JobStatus.RUNNING),
        (JobStatus.QUEUED, JobStatus.CANCELLED),
        (JobStatus.RUNNING, JobStatus.COMPLETED),
        (JobStatus.RUNNING, JobStatus.FAILED),
        (JobStatus.RUNNING, JobStatus.CANCELLED),
        (JobStatus.FAILED, JobStatus.QUEUED),
    ],
)
def test_allowed_job_transitions(current: JobStatus, target: JobStatus) -> None:
    assert can_transition(current, target)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (JobStatus.QUEUED, JobStatus.COMPLETED),
        (JobStatus.COMPLETED, JobStatus.QUEUED),
        (JobStatus.CANCELLED, JobStatus.QUEUED),
        (JobStatus.FAILED, JobStatus.CANCELLED),
        (JobStatus.RUNNING, JobStatus.RUNNING),
    ],
)
def test_rejected_job_transitions(current: JobStatus, target: JobStatus) -> None:
    assert not can_transition(current, target)


def test_terminal_and_active_states() -> None:
    assert {status for status in JobStatus if status.is_terminal} == {
        JobStatus.COMPLETED,
        JobStatus.CANCELLED,
    }
    assert {status for status in JobStatus if status.is_active} == {
        JobStatus.QUEUED,
        JobStatus.RUNNING,
    }


def test_every_job_status_maps_to_a_reachable_game_status() -> None:
    assert set(GAME_STATUS_FOR_JOB) == set(JobStatus)
    assert can_move_game(EvaluationStatus.PENDING, GAME_STATUS_FOR_JOB[JobStatus.QUEUED])
    assert can_move_game(EvaluationStatus.PROCESSING, GAME_STATUS_FOR_JOB[JobStatus.CANCELLED])
    assert not can_move_game(EvaluationStatus.PENDING, EvaluationStatus.COMPLETED)
    assert not can_move_game(EvaluationStatus.COMPLETED, EvaluationStatus.PENDING)
    assert not can_move_game(EvaluationStatus.COMPLETED, EvaluationStatus.QUEUED)


def test_job_progress_ratio() -> None:
    job = EvaluationJob(game_id=new_id(), depth=20, priority=5)
    assert job.progress == 0.0

    job.analyzed_positions, job.total_positions = 20, 80
    assert job.progress == pytest.approx(0.25)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1-0", GameResult.WHITE_WIN),
        (" 0-1 ", GameResult.BLACK_WIN),
        ("½-½", GameResult.DRAW),
        ("*", GameResult.ONGOING),
        ("bogus", GameResult.ONGOING),
        (None, GameResult.ONGOING),
    ],
)
def test_game_result_parse(raw: str | None, expected: GameResult) -> None:
    assert GameResult.parse(raw) is expected


def test_only_manual_source_is_internal() -> None:
    assert [source for source in Source if not source.is_external] == [Source.MANUAL]
