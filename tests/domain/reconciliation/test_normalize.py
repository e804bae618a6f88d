from __future__ import annotations

import uuid

import pytest

from elocatalog.domain.model import Source
from elocatalog.domain.reconciliation import CanonicalKey, is_uuid_like, normalize, try_normalize


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("https://www.chess.com/game/live/123456789", "123456789"),
        ("https://www.chess.com/game/daily/987654", "987654"),
        ("https://www.chess.com/live/game/123/", "https://www.chess.com/live/game/123/"),
        ("  HTTPS://WWW.CHESS.COM/GAME/LIVE/42  ", "42"),
        ("123456789", "123456789"),
    ],
)
def test_normalize_chesscom_extracts_numeric_id(raw: str, expected: str) -> None:
    assert normalize(Source.CHESSCOM, raw) == CanonicalKey(Source.CHESSCOM, expected)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("https://lichess.org/AbCdEfGh", "abcdefgh"),
        ("https://lichess.org/AbCdEfGh/black", "abcdefgh"),
        ("https://lichess.org/AbCdEfGhXyZ1", "abcdefgh"),
        ("AbCdEfGh", "abcdefgh"),
    ],
)
def test_normalize_lichess_extracts_token(raw: str, expected: str) -> None:
    assert normalize(Source.LICHESS, raw).value == expected


def test_normalize_manual_passes_through_lowercased() -> None:
    assert normalize(Source.MANUAL, " 0A1B2C ") == CanonicalKey(Source.MANUAL, "0a1b2c")


@pytest.mark.parametrize(
    ("source", "raw"),
    [
        (Source.CHESSCOM, "https://www.chess.com/game/live/123456789"),
        (Source.CHESSCOM, "Some Opaque Token"),
        (Source.LICHESS, "https://lichess.org/QwErTyUi"),
        (Source.MANUAL, "F00D"),
    ],
)
def test_normalize_is_idempotent_on_bare_value(source: Source, raw: str) -> None:
    key = normalize(source, raw)

    assert normalize(source, key.value) == key
    assert normalize(source, raw) == key


def test_keys_differ_per_source() -> None:
    assert normalize(Source.CHESSCOM, "abc") != normalize(Source.LICHESS, "abc")


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_try_normalize_skips_empty_identifiers(raw: str | None) -> None:
    assert try_normalize(Source.CHESSCOM, raw) is None


def test_is_uuid_like() -> None:
    value = uuid.uuid4()

    assert is_uuid_like(str(value))
    assert is_uuid_like(str(value).upper())
    assert not is_uuid_like(value.hex)
    assert not is_uuid_like("https://lichess.org/abcdefgh")
    assert not is_uuid_like(None)


def test_normalize_keeps_manual_digests_unchanged() -> None:
    digest = "9f86d081884c7d659a2feaa0c55ad015"

    assert normalize(Source.MANUAL, digest).value == digest
