"""Error taxonomy surfaced by the catalog core."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from elocatalog.domain.model import Source


class CatalogError(RuntimeError):
    """Base class for every failure the catalog reports to its callers."""


class ValidationError(CatalogError):
    """Malformed input or a transition the current state does not allow."""


class NotFoundError(CatalogError):
    """Unknown user, game or job id."""

    def __init__(self, kind: str, identifier: object) -> None:
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class ConflictError(CatalogError):
    """Duplicate active job or a lost race against another terminal transition."""


class UpstreamError(CatalogError):
    """A remote collaborator (archive or evaluation service) failed."""

    def __init__(self, message: str, *, source: Source | str | None = None) -> None:
        super().__init__(message)
        self.source = source


class UpstreamTimeoutError(UpstreamError):
    """The collaborator did not answer in time."""


class UpstreamSourceError(UpstreamError):
    """The collaborator answered with an error or an unreadable payload."""


class InternalError(CatalogError):
    """Repository failure."""


__all__ = [
    "CatalogError",
    "ConflictError",
    "InternalError",
    "NotFoundError",
    "UpstreamError",
    "UpstreamSourceError",
    "UpstreamTimeoutError",
    "ValidationError",
]
