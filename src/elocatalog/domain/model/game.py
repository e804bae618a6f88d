"""Games: the durable catalog entry, per-source fetched records, and the merged view."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from elocatalog.domain.model.entity import Entity, utcnow
from elocatalog.domain.model.enums import EvaluationStatus, GameResult, Source

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class PersistedGame(Entity):
    """A game owned by the catalog.

    ``external_id`` is stored exactly as it was last seen (a full link or a bare
    token, depending on who wrote it); comparisons go through the normalizer.
    """

    user_id: UUID
    source: Source
    external_id: str | None
    moves: str
    white_player: str
    black_player: str
    played_at: datetime
    result: GameResult = GameResult.ONGOING
    white_rating: int | None = None
    black_rating: int | None = None
    time_control: str | None = None
    opening_name: str | None = None

    evaluation_status: EvaluationStatus = EvaluationStatus.PENDING
    evaluation_requested_at: datetime | None = None

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class GameRecord:
    """Normalized shape shared by every fetched record, whatever the source."""

    raw_id: str
    white_player: str
    black_player: str
    played_at: datetime
    moves: str
    result: GameResult = GameResult.ONGOING
    white_rating: int | None = None
    black_rating: int | None = None
    time_control: str | None = None
    opening_name: str | None = None

    SOURCE: ClassVar[Source]

    @property
    def source(self) -> Source:
        return self.SOURCE


@dataclass(frozen=True, slots=True, kw_only=True)
class ChessComRecord(GameRecord):
    """Game from the Chess.com archive; ``raw_id`` is the public game link."""

    SOURCE: ClassVar[Source] = Source.CHESSCOM


@dataclass(frozen=True, slots=True, kw_only=True)
class LichessRecord(GameRecord):
    """Game from the Lichess export; ``raw_id`` is ``https://lichess.org/<token>``."""

    SOURCE: ClassVar[Source] = Source.LICHESS


type ExternalRecord = ChessComRecord | LichessRecord


@dataclass(frozen=True, slots=True, kw_only=True)
class UnifiedGame:
    """A fetched or imported game merged with its best-known evaluation status."""

    source: Source
    external_id: str | None
    white_player: str
    black_player: str
    played_at: datetime
    moves: str
    result: GameResult
    evaluation_status: EvaluationStatus
    game_id: UUID | None = None
    white_rating: int | None = None
    black_rating: int | None = None
    time_control: str | None = None
    opening_name: str | None = None

    @property
    def is_evaluated(self) -> bool:
        return self.evaluation_status is EvaluationStatus.COMPLETED

    @classmethod
    def from_record(
        cls,
        record: ExternalRecord,
        *,
        status: EvaluationStatus = EvaluationStatus.PENDING,
        game_id: UUID | None = None,
    ) -> UnifiedGame:
        return cls(
            source=record.source,
            external_id=record.raw_id,
            white_player=record.white_player,
            black_player=record.black_player,
            played_at=record.played_at,
            moves=record.moves,
            result=record.result,
            evaluation_status=status,
            game_id=game_id,
            white_rating=record.white_rating,
            black_rating=record.black_rating,
            time_control=record.time_control,
            opening_name=record.opening_name,
        )

    @classmethod
    def from_persisted(cls, game: PersistedGame) -> UnifiedGame:
        return cls(
            source=game.source,
            external_id=game.external_id,
            white_player=game.white_player,
            black_player=game.black_player,
            played_at=game.played_at,
            moves=game.moves,
            result=game.result,
            evaluation_status=game.evaluation_status,
            game_id=game.id,
            white_rating=game.white_rating,
            black_rating=game.black_rating,
            time_control=game.time_control,
            opening_name=game.opening_name,
        )
