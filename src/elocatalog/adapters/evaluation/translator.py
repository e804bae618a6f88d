"""Translate evaluation service payloads into domain results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from elocatalog.domain.model import EvaluationResult, SideMetrics

if TYPE_CHECKING:
    from .schema import GameAnalysisPayload, GameMetricsPayload


def _side(metrics: GameMetricsPayload) -> SideMetrics:
    return SideMetrics(
        accuracy=metrics.accuracy,
        acpl=metrics.acpl,
        blunders=metrics.blunders,
        mistakes=metrics.mistakes,
        inaccuracies=metrics.inaccuracies,
    )


def parse_analysis(payload: GameAnalysisPayload, *, depth: int) -> EvaluationResult:
    total = payload.total_positions
    if total is None:
        total = payload.white_metrics.total_moves + payload.black_metrics.total_moves
    return EvaluationResult(
        white=_side(payload.white_metrics),
        black=_side(payload.black_metrics),
        depth=payload.depth or depth,
        total_positions=total,
        engine_version=payload.engine_version,
    )
