"""Reusable fakes and builders for catalog and evaluation tests."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Literal

from elocatalog.domain.errors import UpstreamError
from elocatalog.domain.model import (
    ChessComRecord,
    EvaluationJob,
    EvaluationResult,
    EvaluationStatus,
    GameEvaluation,
    GameResult,
    JobStatus,
    LichessRecord,
    PersistedGame,
    SideMetrics,
    Source,
    User,
    utcnow,
)
from elocatalog.domain.ports import CatalogRepositories

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from types import TracebackType
    from uuid import UUID

    from elocatalog.domain.model import ExternalRecord
    from elocatalog.domain.ports import ProgressCallback


def make_user(
    display_name: str = "Example Player",
    *,
    chesscom_username: str | None = "example_cc",
    lichess_username: str | None = "example_li",
) -> User:
    return User(
        display_name=display_name,
        chesscom_username=chesscom_username,
        lichess_username=lichess_username,
    )


def make_game(
    user: User,
    *,
    source: Source = Source.CHESSCOM,
    external_id: str | None = "https://www.chess.com/game/live/123456789",
    status: EvaluationStatus = EvaluationStatus.PENDING,
    played_at: datetime | None = None,
    moves: str = "1. e4 e5 2. Nf3 Nc6 *",
) -> PersistedGame:
    return PersistedGame(
        user_id=user.id,
        source=source,
        external_id=external_id,
        moves=moves,
        white_player="alice",
        black_player="bob",
        played_at=played_at or datetime(2024, 3, 1, 12, tzinfo=UTC),
        result=GameResult.WHITE_WIN,
        evaluation_status=status,
    )


def make_chesscom_record(
    game_number: int = 123456789,
    *,
    played_at: datetime | None = None,
    kind: Literal["live", "daily"] = "live",
) -> ChessComRecord:
    return ChessComRecord(
        raw_id=f"https://www.chess.com/game/{kind}/{game_number}",
        white_player="alice",
        black_player="bob",
        played_at=played_at or datetime(2024, 3, 1, 12, tzinfo=UTC),
        moves="1. e4 e5 2. Nf3 Nc6 *",
        result=GameResult.WHITE_WIN,
        white_rating=1500,
        black_rating=1480,
        time_control="180+2",
    )


def make_lichess_record(
    token: str = "AbCdEfGh",
    *,
    played_at: datetime | None = None,
) -> LichessRecord:
    return LichessRecord(
        raw_id=f"https://lichess.org/{token}",
        white_player="carol",
        black_player="dave",
        played_at=played_at or datetime(2024, 3, 2, 9, tzinfo=UTC),
        moves="e4 c5 Nf3 d6",
        result=GameResult.DRAW,
        time_control="3+2",
    )


def make_result(total_positions: int = 80) -> EvaluationResult:
    return EvaluationResult(
        white=SideMetrics(accuracy=91.5, acpl=18.2, blunders=0, mistakes=1, inaccuracies=2),
        black=SideMetrics(accuracy=77.0, acpl=41.9, blunders=2, mistakes=1, inaccuracies=3),
        depth=20,
        total_positions=total_positions,
        engine_version="Stockfish 16",
    )


class FakeUserRepository:
    def __init__(self) -> None:
        self.items: dict[UUID, User] = {}

    def add(self, entity: User) -> None:
        self.items[entity.id] = entity

    def get(self, entity_id: UUID) -> User | None:
        return self.items.get(entity_id)


class FakeGameRepository:
    def __init__(self) -> None:
        self.items: dict[UUID, PersistedGame] = {}

    def add(self, entity: PersistedGame) -> None:
        self.items[entity.id] = entity

    def get(self, entity_id: UUID) -> PersistedGame | None:
        return self.items.get(entity_id)

    def list_for_user(self, user_id: UUID) -> list[PersistedGame]:
        return [game for game in self.items.values() if game.user_id == user_id]

    def find_by_external_id(
        self,
        *,
        user_id: UUID,
        source: Source,
        external_id: str,
    ) -> PersistedGame | None:
        for game in self.items.values():
            if (game.user_id, game.source, game.external_id) == (user_id, source, external_id):
                return game
        return None

    def set_status(
        self,
        game_id: UUID,
        status: EvaluationStatus,
        *,
        requested: bool = False,
    ) -> None:
        game = self.items[game_id]
        game.evaluation_status = status
        game.updated_at = utcnow()
        if requested:
            game.evaluation_requested_at = game.updated_at


class FakeJobRepository:
    def __init__(self) -> None:
        self.items: dict[UUID, EvaluationJob] = {}
        # hook to simulate another writer between read and compare-and-set
        self.before_compare: Callable[[EvaluationJob], None] | None = None

    def add(self, entity: EvaluationJob) -> None:
        self.items[entity.id] = entity

    def get(self, entity_id: UUID) -> EvaluationJob | None:
        return self.items.get(entity_id)

    def latest_for_game(self, game_id: UUID) -> EvaluationJob | None:
        jobs = [job for job in self.items.values() if job.game_id == game_id]
        return max(jobs, key=lambda job: job.created_at, default=None)

    def list_by_priority(self, *, status: JobStatus | None = None) -> list[EvaluationJob]:
        jobs = [job for job in self.items.values() if status is None or job.status is status]
        jobs.sort(key=lambda job: job.created_at, reverse=True)
        jobs.sort(key=lambda job: job.priority, reverse=True)
        return jobs

    def compare_and_set(
        self,
        job_id: UUID,
        *,
        expected: JobStatus,
        changes: Mapping[str, Any],
    ) -> bool:
        job = self.items.get(job_id)
        if job is None:
            return False
        if self.before_compare is not None:
            hook, self.before_compare = self.before_compare, None
            hook(job)
        if job.status is not expected:
            return False
        for name, value in changes.items():
            setattr(job, name, value)
        return True


class FakeEvaluationRepository:
    def __init__(self) -> None:
        self.items: dict[UUID, GameEvaluation] = {}

    def add(self, entity: GameEvaluation) -> None:
        self.items[entity.id] = entity

    def get(self, entity_id: UUID) -> GameEvaluation | None:
        return self.items.get(entity_id)

    def latest_for_game(self, game_id: UUID) -> GameEvaluation | None:
        evaluations = [item for item in self.items.values() if item.game_id == game_id]
        return max(evaluations, key=lambda item: item.created_at, default=None)


@dataclass
class FakeCatalogUnitOfWork:
    """In-memory unit of work; hand out one instance to share state between blocks."""

    repositories: CatalogRepositories = field(
        default_factory=lambda: CatalogRepositories(
            users=FakeUserRepository(),
            games=FakeGameRepository(),
            jobs=FakeJobRepository(),
            evaluations=FakeEvaluationRepository(),
        )
    )
    committed: int = 0
    rolled_back: int = 0

    def __enter__(self) -> FakeCatalogUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.committed += 1

    def rollback(self) -> None:
        self.rolled_back += 1

    @property
    def users(self) -> FakeUserRepository:
        return self.repositories.users  # type: ignore[return-value]

    @property
    def games(self) -> FakeGameRepository:
        return self.repositories.games  # type: ignore[return-value]

    @property
    def jobs(self) -> FakeJobRepository:
        return self.repositories.jobs  # type: ignore[return-value]

    @property
    def evaluations(self) -> FakeEvaluationRepository:
        return self.repositories.evaluations  # type: ignore[return-value]


class FakeGameFetcher:
    """Archive fetcher returning canned records, or raising a canned error."""

    def __init__(
        self,
        records: Iterable[ExternalRecord] = (),
        *,
        error: UpstreamError | None = None,
        delay: float = 0.0,
    ) -> None:
        self.records = list(records)
        self.error = error
        self.delay = delay
        self.calls: list[dict[str, object]] = []

    def __call__(self, *, account: str, limit: int) -> list[ExternalRecord]:
        self.calls.append({"account": account, "limit": limit})
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.records)


class FakeEvaluator:
    """Evaluation collaborator that replays progress and then answers or fails."""

    def __init__(
        self,
        result: EvaluationResult | None = None,
        *,
        progress: Iterable[tuple[int, int]] = (),
        error: UpstreamError | None = None,
        during: Callable[[], None] | None = None,
    ) -> None:
        self.result = result or make_result()
        self.progress = list(progress)
        self.error = error
        self.during = during
        self.calls: list[dict[str, object]] = []

    def evaluate(self, *, game_id: UUID, moves: str, depth: int) -> EvaluationResult:
        self.calls.append({"game_id": game_id, "moves": moves, "depth": depth})
        if self.error is not None:
            raise self.error
        return self.result

    def evaluate_stream(
        self,
        *,
        game_id: UUID,
        moves: str,
        depth: int,
        on_progress: ProgressCallback,
    ) -> EvaluationResult:
        self.calls.append({"game_id": game_id, "moves": moves, "depth": depth})
        for analyzed, total in self.progress:
            on_progress(analyzed, total)
        if self.during is not None:
            self.during()
        if self.error is not None:
            raise self.error
        return self.result
