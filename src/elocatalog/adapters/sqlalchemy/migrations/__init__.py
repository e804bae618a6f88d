"""Alembic migrations bundled with the storage adapter.

``upgrade_head`` always runs the scripts next to this module, so a checkout and
an installed wheel migrate the same way. The ``alembic`` command line reads
``[tool.alembic]`` from pyproject.toml instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from elocatalog.config.storage import get_database_uri

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent
HEAD: Final[str] = "head"


def build_config(*, database_uri: str | None = None) -> Config:
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if database_uri is not None:
        # ConfigParser interpolation treats a bare % as a placeholder
        config.set_main_option("sqlalchemy.url", database_uri.replace("%", "%%"))
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Migrate ``engine`` (or the database at ``database_uri``) to the newest revision."""

    if engine is None:
        command.upgrade(build_config(database_uri=database_uri or get_database_uri()), HEAD)
        return

    config = build_config()
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, HEAD)
