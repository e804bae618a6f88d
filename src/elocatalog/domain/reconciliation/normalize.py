"""Canonical comparison keys for external game identifiers.

Each archive hands out identifiers in its own scheme, and the catalog has stored
both full links and bare tokens over time. Keys derived here exist only for the
duration of one reconciliation pass; they are never persisted or shown.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from elocatalog.domain.model import Source

# ``https://www.chess.com/game/live/123456789`` or ``.../daily/123456789``
_CHESSCOM_GAME_ID = re.compile(r"/(?:live|daily)/(\d+)")
# ``https://lichess.org/abcdefgh`` (optionally followed by a player suffix or a colour)
_LICHESS_GAME_ID = re.compile(r"lichess\.org/(\w{8})")
_UUID_SHAPE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

_PATTERNS: dict[Source, re.Pattern[str]] = {
    Source.CHESSCOM: _CHESSCOM_GAME_ID,
    Source.LICHESS: _LICHESS_GAME_ID,
}


class CanonicalKey(NamedTuple):
    source: Source
    value: str


def normalize(source: Source, raw_id: str) -> CanonicalKey:
    """Map a raw identifier (link or bare token) onto its comparison key.

    Unrecognised shapes fall back to the lower-cased, trimmed input, which makes
    the function idempotent: feeding ``key.value`` back in yields ``key`` again.
    Manual identifiers take the fallback too, so they are trimmed and lower-cased
    like any other unrecognised shape; they are hex digests, so nothing collides.
    """

    cleaned = raw_id.strip().lower()
    pattern = _PATTERNS.get(source)
    if pattern is not None:
        match = pattern.search(cleaned)
        if match:
            return CanonicalKey(source, match.group(1))
    return CanonicalKey(source, cleaned)


def try_normalize(source: Source, raw_id: str | None) -> CanonicalKey | None:
    if raw_id is None or not raw_id.strip():
        return None
    return normalize(source, raw_id)


def is_uuid_like(value: str | None) -> bool:
    if not value:
        return False
    return _UUID_SHAPE.match(value.strip()) is not None


__all__ = ["CanonicalKey", "is_uuid_like", "normalize", "try_normalize"]
