"""Merge freshly fetched games with the persisted catalog."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from elocatalog.domain.model import EvaluationStatus, Source, UnifiedGame

from .lookup import build_lookup
from .normalize import try_normalize

if TYPE_CHECKING:
    from collections.abc import Iterable

    from elocatalog.domain.model import ExternalRecord, PersistedGame

log = getLogger(__name__)


def reconcile(
    records: Iterable[ExternalRecord],
    persisted: Iterable[PersistedGame],
    *,
    evaluated: bool | None = None,
) -> list[UnifiedGame]:
    """Return the unified view of ``records`` plus manually imported games.

    Reading only: nothing in ``persisted`` is modified. Output is sorted newest
    first. ``evaluated=False`` drops completed games, ``evaluated=True`` keeps
    only them.
    """

    stored = list(persisted)
    lookup = build_lookup(stored)

    unified: list[UnifiedGame] = []
    matched = 0
    for record in records:
        entry = lookup.resolve(try_normalize(record.source, record.raw_id))
        if entry is None:
            unified.append(UnifiedGame.from_record(record))
            continue
        matched += 1
        unified.append(
            UnifiedGame.from_record(record, status=entry.status, game_id=entry.game_id)
        )

    unified.extend(
        UnifiedGame.from_persisted(game) for game in stored if game.source is Source.MANUAL
    )
    log.debug("Reconciled %s records, matched=%s", len(unified), matched)

    unified.sort(key=lambda game: game.played_at, reverse=True)
    if evaluated is None:
        return unified
    return [
        game
        for game in unified
        if (game.evaluation_status is EvaluationStatus.COMPLETED) == evaluated
    ]
