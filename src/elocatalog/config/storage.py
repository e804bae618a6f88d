"""Where the catalog keeps its files.

Everything lives in one data directory: ``$ELOCATALOG_DATA_DIR`` if set,
otherwise ``elocatalog`` under the platform's user data directory. The database
location can be overridden entirely with ``$DATABASE_URI``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "elocatalog"
DEFAULT_DB_FILENAME: Final[str] = "elocatalog.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def file(self, filename: str, *, create_dir: bool = True) -> Path:
        """Path of ``filename`` inside the data directory, creating the directory on demand."""

        directory = self.resolve_data_dir()
        if create_dir:
            directory.mkdir(parents=True, exist_ok=True)
        return directory / filename


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _platform_data_home() -> Path:
    if os.name == "nt":
        local = os.getenv("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = os.getenv("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    explicit = os.getenv("ELOCATALOG_DATA_DIR")
    data_dir = Path(explicit) if explicit else _platform_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir)


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    if override := os.getenv("DATABASE_URI"):
        return DatabaseConfig(uri=override)
    path = (storage or get_storage_config()).file(DEFAULT_DB_FILENAME)
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{path}")


def get_database_uri() -> str:
    return get_database_config().uri


def get_http_cache_path() -> Path:
    return get_storage_config().file(HTTP_CACHE_FILENAME)
