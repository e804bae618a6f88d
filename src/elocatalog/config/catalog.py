"""Catalog and evaluation-job defaults."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_JOB_PRIORITY = 5
MIN_JOB_PRIORITY = 1
MAX_JOB_PRIORITY = 10
DEFAULT_EVALUATION_DEPTH = 20
DEFAULT_PAGE_SIZE = 20
MAX_REPORTED_IMPORT_ERRORS = 10
DEFAULT_FETCH_DEADLINE_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class CatalogConfig:
    default_priority: int = DEFAULT_JOB_PRIORITY
    default_depth: int = DEFAULT_EVALUATION_DEPTH
    min_priority: int = MIN_JOB_PRIORITY
    max_priority: int = MAX_JOB_PRIORITY
    page_size: int = DEFAULT_PAGE_SIZE
    max_reported_errors: int = MAX_REPORTED_IMPORT_ERRORS
    fetch_deadline_seconds: float = DEFAULT_FETCH_DEADLINE_SECONDS


def get_catalog_config() -> CatalogConfig:
    return CatalogConfig()
