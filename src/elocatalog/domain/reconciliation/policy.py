"""Ranking used when several stored games claim the same external game."""

from __future__ import annotations

from typing import Final

from elocatalog.domain.model import EvaluationStatus

STATUS_RANK: Final[dict[EvaluationStatus, int]] = {
    EvaluationStatus.PENDING: 1,
    EvaluationStatus.QUEUED: 2,
    EvaluationStatus.PROCESSING: 3,
    EvaluationStatus.FAILED: 4,
    EvaluationStatus.COMPLETED: 5,
}


def rank(status: EvaluationStatus) -> int:
    return STATUS_RANK.get(status, 0)


def outranks(candidate: EvaluationStatus, current: EvaluationStatus) -> bool:
    """Strictly higher only; on equal rank the entry seen first is kept."""

    return rank(candidate) > rank(current)
