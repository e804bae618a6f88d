"""HTTP client for the remote evaluation service."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from elocatalog.adapters.http_resilience import ResilientClient, upstream_errors
from elocatalog.config.evaluation import EvaluationServiceConfig, get_evaluation_config
from elocatalog.domain.errors import UpstreamSourceError

from .schema import AnalyzeGameRequest, GameAnalysisPayload, GameAnalysisProgressPayload
from .translator import parse_analysis

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from elocatalog.config.http_resilience import ResilienceConfig
    from elocatalog.domain.model import EvaluationResult
    from elocatalog.domain.ports.evaluation import Evaluator, ProgressCallback

log = getLogger(__name__)

SOURCE_NAME = "evaluation service"
ANALYZE_PATH = "/games/analyze"
ANALYZE_STREAM_PATH = "/games/analyze/stream"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _request_body(*, game_id: UUID, moves: str, depth: int) -> dict[str, object]:
    request = AnalyzeGameRequest(game_id=str(game_id), pgn=moves, depth=depth)
    return request.model_dump(by_alias=True)


@dataclass(slots=True)
class HttpEvaluator:
    config: EvaluationServiceConfig = field(default_factory=get_evaluation_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def evaluate(self, *, game_id: UUID, moves: str, depth: int) -> EvaluationResult:
        with upstream_errors(SOURCE_NAME):
            return asyncio.run(self._evaluate_async(game_id=game_id, moves=moves, depth=depth))

    def evaluate_stream(
        self,
        *,
        game_id: UUID,
        moves: str,
        depth: int,
        on_progress: ProgressCallback,
    ) -> EvaluationResult:
        with upstream_errors(SOURCE_NAME):
            return asyncio.run(
                self._evaluate_stream_async(
                    game_id=game_id,
                    moves=moves,
                    depth=depth,
                    on_progress=on_progress,
                )
            )

    async def _evaluate_async(self, *, game_id: UUID, moves: str, depth: int) -> EvaluationResult:
        async with self.client_factory(self.config.resilience) as client:
            response = await client.post(
                ANALYZE_PATH,
                json=_request_body(game_id=game_id, moves=moves, depth=depth),
            )
            response.raise_for_status()
            payload = GameAnalysisPayload.model_validate_json(response.content)
        return parse_analysis(payload, depth=depth)

    async def _evaluate_stream_async(
        self,
        *,
        game_id: UUID,
        moves: str,
        depth: int,
        on_progress: ProgressCallback,
    ) -> EvaluationResult:
        body = _request_body(game_id=game_id, moves=moves, depth=depth)
        async with (
            self.client_factory(self.config.resilience) as client,
            client.stream("POST", ANALYZE_STREAM_PATH, json=body) as response,
        ):
            response.raise_for_status()
            async for line in response.aiter_lines():
                if not line.strip():
                    continue
                update = GameAnalysisProgressPayload.model_validate_json(line)
                if update.status == "failed":
                    raise UpstreamSourceError(
                        update.error_message or "evaluation failed",
                        source=SOURCE_NAME,
                    )
                if update.status == "completed":
                    if update.analysis is None:
                        raise UpstreamSourceError(
                            "evaluation completed without a result", source=SOURCE_NAME
                        )
                    log.debug("Evaluation of game %s finished", game_id)
                    return parse_analysis(update.analysis, depth=depth)
                if update.total_moves > 0:
                    on_progress(update.current_move, update.total_moves)

        raise UpstreamSourceError("evaluation stream ended without a result", source=SOURCE_NAME)


if TYPE_CHECKING:
    _evaluator_check: Evaluator = HttpEvaluator()
