from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from elocatalog import app
from elocatalog.domain.catalog import GameFilters
from elocatalog.domain.errors import UpstreamSourceError
from elocatalog.domain.model import EvaluationStatus, Source
from tests.helpers.catalog import FakeGameFetcher, make_chesscom_record, make_lichess_record

if TYPE_CHECKING:
    from collections.abc import Callable

    from elocatalog.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork

BATCH = """[Event "Club night"]
[Date "2024.02.10"]
[White "Erin"]
[Black "Frank"]
[Result "1-0"]

1. d4 d5 2. c4 e6 1-0

[Event "Club night"]
[Date "2024.02.11"]
[White "Frank"]
[Black "Erin"]
[Result "1/2-1/2"]

1. e4 c5 1/2-1/2
"""


@pytest.mark.integration
def test_import_then_list_manual_games(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    user = app.create_user(display_name="Erin", unit_of_work_factory=sqlite_unit_of_work)

    report = app.import_games(user.id, BATCH, unit_of_work_factory=sqlite_unit_of_work)
    again = app.import_games(user.id, BATCH, unit_of_work_factory=sqlite_unit_of_work)
    listing = app.list_games(
        user.id,
        fetchers={},
        unit_of_work_factory=sqlite_unit_of_work,
    )

    assert (report.accepted, report.rejected) == (2, 0)
    assert (again.accepted, again.rejected) == (0, 2)
    assert listing.total == 2
    assert [game.white_player for game in listing.games] == ["Frank", "Erin"]
    assert all(game.source is Source.MANUAL for game in listing.games)
    assert not listing.partial


@pytest.mark.integration
def test_listing_merges_archives_with_stored_games(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    user = app.create_user(
        display_name="Alice",
        chesscom_username="alice",
        lichess_username="alice_li",
        unit_of_work_factory=sqlite_unit_of_work,
    )
    stored = make_chesscom_record(1001, played_at=datetime(2024, 3, 5, tzinfo=UTC))
    game_id = app.save_game(user.id, stored, unit_of_work_factory=sqlite_unit_of_work)
    app.request_evaluation(game_id, unit_of_work_factory=sqlite_unit_of_work)

    fetchers = {
        Source.CHESSCOM: FakeGameFetcher(
            [stored, make_chesscom_record(1002, played_at=datetime(2024, 3, 6, tzinfo=UTC))]
        ),
        Source.LICHESS: FakeGameFetcher(error=UpstreamSourceError("down", source=Source.LICHESS)),
    }

    listing = app.list_games(
        user.id,
        GameFilters(limit=10),
        fetchers=fetchers,
        unit_of_work_factory=sqlite_unit_of_work,
    )

    assert listing.total == 2
    assert [game.external_id for game in listing.games] == [
        "https://www.chess.com/game/live/1002",
        "https://www.chess.com/game/live/1001",
    ]
    assert listing.games[1].game_id == game_id
    assert listing.games[1].evaluation_status is EvaluationStatus.QUEUED
    assert listing.games[0].game_id is None
    assert set(listing.warnings) == {Source.LICHESS}


@pytest.mark.integration
def test_sync_stores_new_archive_games_once(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    user = app.create_user(
        display_name="Carol",
        chesscom_username="carol_cc",
        lichess_username="carol",
        unit_of_work_factory=sqlite_unit_of_work,
    )
    fetchers = {
        Source.CHESSCOM: FakeGameFetcher([make_chesscom_record(2001)]),
        Source.LICHESS: FakeGameFetcher([make_lichess_record("Game0001")]),
    }

    first = app.sync_games(
        user.id, limit=5, fetchers=fetchers, deadlines={}, unit_of_work_factory=sqlite_unit_of_work
    )
    second = app.sync_games(
        user.id, limit=5, fetchers=fetchers, deadlines={}, unit_of_work_factory=sqlite_unit_of_work
    )

    assert (first.fetched, first.stored, first.skipped) == (2, 2, 0)
    assert (second.stored, second.skipped) == (0, 2)
    with sqlite_unit_of_work() as uow:
        games = uow.repositories.games.list_for_user(user.id)
    assert sorted(game.external_id or "" for game in games) == ["2001", "game0001"]
    assert fetchers[Source.LICHESS].calls == [
        {"account": "carol", "limit": 5},
        {"account": "carol", "limit": 5},
    ]


@pytest.mark.integration
def test_saving_a_listed_game_twice_returns_same_id(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    user = app.create_user(
        display_name="Dave", lichess_username="dave", unit_of_work_factory=sqlite_unit_of_work
    )
    record = make_lichess_record("AbCdEfGh")
    app.sync_games(
        user.id,
        fetchers={Source.LICHESS: FakeGameFetcher([record])},
        deadlines={},
        unit_of_work_factory=sqlite_unit_of_work,
    )

    first = app.save_game(user.id, record, unit_of_work_factory=sqlite_unit_of_work)
    second = app.save_game(user.id, record, unit_of_work_factory=sqlite_unit_of_work)

    assert first == second
    with sqlite_unit_of_work() as uow:
        assert len(uow.repositories.games.list_for_user(user.id)) == 1
