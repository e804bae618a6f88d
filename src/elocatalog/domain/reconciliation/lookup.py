"""Lookup tables built from the persisted catalog for one reconciliation pass."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from elocatalog.domain.model import EvaluationStatus

from .normalize import CanonicalKey, is_uuid_like, try_normalize
from .policy import outranks

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from elocatalog.domain.model import PersistedGame

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LookupEntry:
    game_id: UUID
    status: EvaluationStatus
    external_id: str | None


@dataclass(slots=True)
class CatalogLookup:
    """Primary (canonical key) and secondary (referenced internal id) tables."""

    primary: dict[CanonicalKey, LookupEntry]
    secondary: dict[str, LookupEntry]

    def resolve(self, key: CanonicalKey | None) -> LookupEntry | None:
        if key is None:
            return None
        entry = self.primary.get(key)
        if entry is None or entry.status is EvaluationStatus.COMPLETED:
            return entry
        recovered = self.secondary.get(str(entry.game_id).lower())
        if recovered is None:
            return entry
        log.debug(
            "Recovered completed status for game %s via stored game %s",
            entry.game_id,
            recovered.game_id,
        )
        return LookupEntry(
            game_id=recovered.game_id,
            status=recovered.status,
            external_id=entry.external_id,
        )


def build_primary(games: Iterable[PersistedGame]) -> dict[CanonicalKey, LookupEntry]:
    table: dict[CanonicalKey, LookupEntry] = {}
    for game in games:
        key = try_normalize(game.source, game.external_id)
        if key is None:
            continue
        existing = table.get(key)
        if existing is None or outranks(game.evaluation_status, existing.status):
            table[key] = LookupEntry(
                game_id=game.id,
                status=game.evaluation_status,
                external_id=game.external_id,
            )
    return table


def build_secondary(games: Iterable[PersistedGame]) -> dict[str, LookupEntry]:
    """Completed games whose external id is really another stored game's internal id.

    Evaluations were at times saved under the internal id of the game they belong
    to instead of its archive link. Keyed by that referenced id, so a primary hit
    on the referenced game can be upgraded to the completed record.
    """

    table: dict[str, LookupEntry] = {}
    for game in games:
        if game.evaluation_status is not EvaluationStatus.COMPLETED:
            continue
        if game.external_id is None or not is_uuid_like(game.external_id):
            continue
        table[game.external_id.strip().lower()] = LookupEntry(
            game_id=game.id,
            status=EvaluationStatus.COMPLETED,
            external_id=game.external_id,
        )
    return table


def build_lookup(games: Iterable[PersistedGame]) -> CatalogLookup:
    snapshot = list(games)
    lookup = CatalogLookup(primary=build_primary(snapshot), secondary=build_secondary(snapshot))
    log.debug(
        "Built catalog lookup: primary=%s, secondary=%s",
        len(lookup.primary),
        len(lookup.secondary),
    )
    return lookup
