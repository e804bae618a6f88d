"""Reconciliation of fetched archive games against the persisted catalog.

Flow per listing:
1) normalize every identifier into a per-source canonical key
2) build primary and secondary lookups from the stored games
3) resolve each fetched record, attaching status and internal id
4) append manual imports, sort and filter
"""

from __future__ import annotations

from .engine import reconcile
from .lookup import CatalogLookup, LookupEntry, build_lookup
from .normalize import CanonicalKey, is_uuid_like, normalize, try_normalize
from .policy import STATUS_RANK, outranks, rank

__all__ = [
    "STATUS_RANK",
    "CanonicalKey",
    "CatalogLookup",
    "LookupEntry",
    "build_lookup",
    "is_uuid_like",
    "normalize",
    "outranks",
    "rank",
    "reconcile",
    "try_normalize",
]
