"""Application configuration helpers."""

from __future__ import annotations

from .catalog import CatalogConfig, get_catalog_config
from .chesscom import ChessComConfig, get_chesscom_config
from .env import optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .evaluation import EvaluationServiceConfig, get_evaluation_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .lichess import LichessConfig, get_lichess_config
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_http_cache_path,
    get_storage_config,
)

__all__ = [
    "CacheConfig",
    "CatalogConfig",
    "ChessComConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "EvaluationServiceConfig",
    "LichessConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_catalog_config",
    "get_chesscom_config",
    "get_database_config",
    "get_database_uri",
    "get_evaluation_config",
    "get_http_cache_path",
    "get_lichess_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
