"""Catalog service: listing, manual import and archive sync for one user."""

from __future__ import annotations

import hashlib
import io
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

import chess.pgn

from elocatalog.config.catalog import CatalogConfig
from elocatalog.domain.batch_parser import parse_batch
from elocatalog.domain.errors import NotFoundError, ValidationError
from elocatalog.domain.fanout import fetch_all
from elocatalog.domain.model import (
    EvaluationStatus,
    GameResult,
    PersistedGame,
    Source,
    UnifiedGame,
    User,
    utcnow,
)
from elocatalog.domain.reconciliation import build_lookup, reconcile, try_normalize

if TYPE_CHECKING:
    from collections.abc import Mapping
    from uuid import UUID

    from elocatalog.domain.batch_parser import ParsedEntry
    from elocatalog.domain.model import ExternalRecord
    from elocatalog.domain.ports import CatalogRepositories, CatalogUnitOfWork, GameFetcher

UnitOfWorkFactory = Callable[[], "CatalogUnitOfWork"]

log = getLogger(__name__)

_DEFAULT_CONFIG = CatalogConfig()
_UNKNOWN_PLAYER = "Unknown"
_MANUAL_ID_LENGTH = 32


@dataclass(frozen=True, slots=True)
class GameFilters:
    source: Source | None = None
    evaluated: bool | None = None
    page: int = 1
    limit: int = _DEFAULT_CONFIG.page_size

    def validate(self) -> None:
        if self.page < 1:
            raise ValidationError(f"Page must be at least 1, got {self.page}")
        if self.limit < 1:
            raise ValidationError(f"Limit must be at least 1, got {self.limit}")


@dataclass(slots=True)
class GameListing:
    """One page of the unified view plus non-fatal per-source warnings."""

    games: list[UnifiedGame]
    total: int
    page: int
    limit: int
    warnings: dict[Source, str] = field(default_factory=dict["Source", str])

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def partial(self) -> bool:
        return bool(self.warnings)


@dataclass(slots=True)
class ImportReport:
    accepted: int = 0
    rejected: int = 0
    errors: list[str] = field(default_factory=list[str])
    game_ids: list[UUID] = field(default_factory=list["UUID"])


@dataclass(slots=True)
class SyncReport:
    fetched: int = 0
    stored: int = 0
    skipped: int = 0
    warnings: dict[Source, str] = field(default_factory=dict["Source", str])


def _require_user(repositories: CatalogRepositories, user_id: UUID) -> User:
    user = repositories.users.get(user_id)
    if user is None:
        raise NotFoundError("user", user_id)
    return user


def create_user(
    *,
    display_name: str,
    unit_of_work_factory: UnitOfWorkFactory,
    email: str | None = None,
    chesscom_username: str | None = None,
    lichess_username: str | None = None,
) -> User:
    if not display_name.strip():
        raise ValidationError("Display name must not be empty")
    user = User(
        display_name=display_name.strip(),
        email=email,
        chesscom_username=chesscom_username,
        lichess_username=lichess_username,
    )
    with unit_of_work_factory() as uow:
        uow.repositories.users.add(user)
        uow.commit()
    log.info("Created user %s (%s)", user.id, user.display_name)
    return user


def _fetch_requests(
    user: User,
    fetchers: Mapping[Source, GameFetcher],
    only: Source | None,
) -> dict[Source, tuple[GameFetcher, str]]:
    requests: dict[Source, tuple[GameFetcher, str]] = {}
    for source in user.linked_sources:
        if only is not None and source is not only:
            continue
        handle = user.handle_for(source)
        fetcher = fetchers.get(source)
        if handle and fetcher is not None:
            requests[source] = (fetcher, handle)
    return requests


def list_unified_games(
    user_id: UUID,
    filters: GameFilters | None = None,
    *,
    fetchers: Mapping[Source, GameFetcher],
    unit_of_work_factory: UnitOfWorkFactory,
    deadlines: Mapping[Source, float] | None = None,
    config: CatalogConfig = _DEFAULT_CONFIG,
) -> GameListing:
    """Fetch the user's archives, merge them with the catalog and return one page.

    A source that fails or times out is reported in ``warnings``; the listing
    still contains everything else.
    """

    effective = filters or GameFilters(limit=config.page_size)
    effective.validate()

    with unit_of_work_factory() as uow:
        user = _require_user(uow.repositories, user_id)
        persisted = uow.repositories.games.list_for_user(user_id)

    requests = _fetch_requests(user, fetchers, effective.source)
    fetched = fetch_all(
        requests,
        limit=effective.page * effective.limit,
        deadlines=deadlines or {},
        default_deadline=config.fetch_deadline_seconds,
    )

    unified = reconcile(fetched.records, persisted, evaluated=effective.evaluated)
    if effective.source is not None:
        unified = [game for game in unified if game.source is effective.source]

    start = (effective.page - 1) * effective.limit
    listing = GameListing(
        games=unified[start : start + effective.limit],
        total=len(unified),
        page=effective.page,
        limit=effective.limit,
        warnings=fetched.warnings,
    )
    log.info(
        "Listed games for user %s: total=%s, page=%s/%s, warnings=%s",
        user_id,
        listing.total,
        listing.page,
        listing.total_pages,
        sorted(listing.warnings),
    )
    return listing


def manual_external_id(entry: ParsedEntry) -> str:
    """Opaque, content-derived identifier for a pasted record."""

    canonical = "\n".join(
        [*(f"{key}={entry.headers[key]}" for key in sorted(entry.headers)), entry.body]
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:_MANUAL_ID_LENGTH]


def _parse_rating(raw: str | None) -> int | None:
    if raw is None or not raw.isdigit():
        return None
    return int(raw)


def _header_value(headers: Mapping[str, str], name: str) -> str | None:
    value = (headers.get(name) or "").strip()
    if not value or value == "?":
        return None
    return value


def _parse_played_at(headers: Mapping[str, str]) -> datetime | None:
    raw_date = _header_value(headers, "UTCDate") or _header_value(headers, "Date")
    if raw_date is None:
        return None
    year, _, rest = raw_date.partition(".")
    month, _, day = rest.partition(".")
    if not year.isdigit():
        return None
    # unknown month or day (``??``) falls back to the first
    date_text = f"{year}.{month if month.isdigit() else '01'}.{day if day.isdigit() else '01'}"
    time_text = _header_value(headers, "UTCTime") or "00:00:00"
    for candidate in (f"{date_text} {time_text}", f"{date_text} 00:00:00"):
        try:
            return datetime.strptime(candidate, "%Y.%m.%d %H:%M:%S").replace(tzinfo=UTC)
        except ValueError:
            continue
    return None


def _pgn_text(entry: ParsedEntry) -> str:
    tags = "\n".join(
        '[{} "{}"]'.format(key, value.replace("\\", "\\\\").replace('"', '\\"'))
        for key, value in entry.headers.items()
    )
    return f"{tags}\n\n{entry.body}\n" if tags else f"{entry.body}\n"


def read_entry(entry: ParsedEntry) -> chess.pgn.Game:
    """Replay one record's moves; raises ``ValidationError`` unless every move is legal."""

    if not entry.body:
        raise ValidationError("record has no move text")
    game = chess.pgn.read_game(io.StringIO(_pgn_text(entry)))
    if game is None:
        raise ValidationError("record has no move text")
    if game.errors:
        raise ValidationError(f"record has unreadable moves: {game.errors[0]}")
    if game.next() is None:
        raise ValidationError("record has no moves")
    return game


def game_from_entry(user_id: UUID, entry: ParsedEntry, *, external_id: str) -> PersistedGame:
    """Build a manual game from one parsed record."""

    headers = read_entry(entry).headers
    return PersistedGame(
        user_id=user_id,
        source=Source.MANUAL,
        external_id=external_id,
        moves=entry.body,
        white_player=_header_value(headers, "White") or _UNKNOWN_PLAYER,
        black_player=_header_value(headers, "Black") or _UNKNOWN_PLAYER,
        played_at=_parse_played_at(headers) or utcnow(),
        result=GameResult.parse(headers.get("Result")),
        white_rating=_parse_rating(_header_value(headers, "WhiteElo")),
        black_rating=_parse_rating(_header_value(headers, "BlackElo")),
        time_control=_header_value(headers, "TimeControl"),
        opening_name=_header_value(headers, "Opening") or _header_value(headers, "ECO"),
    )


def import_batch(
    user_id: UUID,
    text: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    config: CatalogConfig = _DEFAULT_CONFIG,
) -> ImportReport:
    """Store every well-formed record in ``text`` as a manual game.

    Raises ``ValidationError`` when the text holds no records at all; individual
    bad records are counted as rejected and described in ``errors``.
    """

    entries = parse_batch(text)
    if not entries:
        raise ValidationError("no importable records found")

    report = ImportReport()
    problems: list[str] = []
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        _require_user(repositories, user_id)
        seen: set[str] = set()
        for index, entry in enumerate(entries, start=1):
            external_id = manual_external_id(entry)
            if external_id in seen or repositories.games.find_by_external_id(
                user_id=user_id, source=Source.MANUAL, external_id=external_id
            ):
                report.rejected += 1
                problems.append(f"record {index}: duplicate of an already imported record")
                continue
            try:
                game = game_from_entry(user_id, entry, external_id=external_id)
            except ValidationError as exc:
                report.rejected += 1
                problems.append(f"record {index}: {exc}")
                continue
            seen.add(external_id)
            repositories.games.add(game)
            report.accepted += 1
            report.game_ids.append(game.id)
        uow.commit()

    report.errors = problems[: config.max_reported_errors]
    log.info(
        "Imported batch for user %s: accepted=%s, rejected=%s",
        user_id,
        report.accepted,
        report.rejected,
    )
    return report


def _game_from_record(
    user_id: UUID,
    record: ExternalRecord,
    *,
    external_id: str,
) -> PersistedGame:
    return PersistedGame(
        user_id=user_id,
        source=record.source,
        external_id=external_id,
        moves=record.moves,
        white_player=record.white_player,
        black_player=record.black_player,
        played_at=record.played_at,
        result=record.result,
        white_rating=record.white_rating,
        black_rating=record.black_rating,
        time_control=record.time_control,
        opening_name=record.opening_name,
        evaluation_status=EvaluationStatus.PENDING,
    )


def save_external_game(
    user_id: UUID,
    record: ExternalRecord,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> UUID:
    """Persist one listed game under its link; returns the stored id.

    A game already stored under any identifier that normalizes to the same key
    is returned as is.
    """

    key = try_normalize(record.source, record.raw_id)
    if key is None:
        raise ValidationError("external game has no identifier")

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        _require_user(repositories, user_id)
        existing = repositories.games.find_by_external_id(
            user_id=user_id, source=record.source, external_id=record.raw_id
        )
        if existing is not None:
            return existing.id
        entry = build_lookup(repositories.games.list_for_user(user_id)).primary.get(key)
        if entry is not None:
            return entry.game_id

        game = _game_from_record(user_id, record, external_id=record.raw_id)
        repositories.games.add(game)
        uow.commit()

    log.info("Stored %s game %s as %s", record.source, record.raw_id, game.id)
    return game.id


def sync_external_games(
    user_id: UUID,
    *,
    fetchers: Mapping[Source, GameFetcher],
    unit_of_work_factory: UnitOfWorkFactory,
    limit: int = _DEFAULT_CONFIG.page_size,
    deadlines: Mapping[Source, float] | None = None,
    config: CatalogConfig = _DEFAULT_CONFIG,
) -> SyncReport:
    """Store every fetched game the catalog does not know yet, under its bare id."""

    if limit < 1:
        raise ValidationError(f"Limit must be at least 1, got {limit}")

    with unit_of_work_factory() as uow:
        user = _require_user(uow.repositories, user_id)

    fetched = fetch_all(
        _fetch_requests(user, fetchers, None),
        limit=limit,
        deadlines=deadlines or {},
        default_deadline=config.fetch_deadline_seconds,
    )
    report = SyncReport(fetched=len(fetched.records), warnings=fetched.warnings)

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        known = set(build_lookup(repositories.games.list_for_user(user_id)).primary)
        for record in fetched.records:
            key = try_normalize(record.source, record.raw_id)
            if key is None or key in known:
                report.skipped += 1
                continue
            known.add(key)
            repositories.games.add(_game_from_record(user_id, record, external_id=key.value))
            report.stored += 1
        uow.commit()

    log.info(
        "Synced games for user %s: fetched=%s, stored=%s, skipped=%s",
        user_id,
        report.fetched,
        report.stored,
        report.skipped,
    )
    return report


__all__ = [
    "GameFilters",
    "GameListing",
    "ImportReport",
    "SyncReport",
    "create_user",
    "game_from_entry",
    "import_batch",
    "list_unified_games",
    "manual_external_id",
    "read_entry",
    "save_external_game",
    "sync_external_games",
]
