"""Port for the remote evaluation collaborator."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uuid import UUID

    from elocatalog.domain.model import EvaluationResult

ProgressCallback = Callable[[int, int], None]
"""Receives ``(analyzed, total)`` while an evaluation is streaming."""


@runtime_checkable
class Evaluator(Protocol):
    def evaluate(self, *, game_id: UUID, moves: str, depth: int) -> EvaluationResult: ...

    def evaluate_stream(
        self,
        *,
        game_id: UUID,
        moves: str,
        depth: int,
        on_progress: ProgressCallback,
    ) -> EvaluationResult: ...


__all__ = ["Evaluator", "ProgressCallback"]
