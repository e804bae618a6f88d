"""Catalog owners and the archive handles linked to them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from elocatalog.domain.model.entity import Entity, utcnow
from elocatalog.domain.model.enums import Source

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(eq=False, kw_only=True)
class User(Entity):
    display_name: str
    email: str | None = None

    # Optional denormalized external handles
    chesscom_username: str | None = None
    lichess_username: str | None = None

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    def handle_for(self, source: Source) -> str | None:
        if source is Source.CHESSCOM:
            return self.chesscom_username
        if source is Source.LICHESS:
            return self.lichess_username
        return None

    @property
    def linked_sources(self) -> tuple[Source, ...]:
        return tuple(source for source in Source if self.handle_for(source))
