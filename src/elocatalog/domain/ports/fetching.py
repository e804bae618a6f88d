"""Ports for fetching games from external archives."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from elocatalog.domain.model import ExternalRecord


@runtime_checkable
class GameFetcher(Protocol):
    """Callable port returning the most recent games of one account on one archive.

    Implementations raise ``UpstreamTimeoutError`` or ``UpstreamSourceError``;
    anything else is treated as a bug.
    """

    def __call__(self, *, account: str, limit: int) -> list[ExternalRecord]: ...


__all__ = ["GameFetcher"]
