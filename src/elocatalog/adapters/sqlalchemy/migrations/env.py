"""Alembic environment for the catalog schema.

Runs against a connection handed over through ``config.attributes`` when
``upgrade_head`` was given an engine, otherwise against ``sqlalchemy.url`` or
the configured database.
"""

from __future__ import annotations

import logging
from logging.config import fileConfig
from pathlib import Path
from typing import TYPE_CHECKING

from alembic import context
from sqlalchemy import create_engine, pool

from elocatalog.adapters.sqlalchemy.mappings import mapper_registry, start_mappers
from elocatalog.config import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

config = context.config
if config.config_file_name and Path(config.config_file_name).suffix == ".ini":
    fileConfig(config.config_file_name)

log = logging.getLogger("alembic.env")

start_mappers()
target_metadata = mapper_registry.metadata

# SQLite cannot ALTER most constraints in place
_OPTIONS = {"target_metadata": target_metadata, "render_as_batch": True, "compare_type": True}


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


def _run(connection: Connection) -> None:
    context.configure(connection=connection, **_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    context.configure(url=_database_url(), literal_binds=True, **_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    handed_over: Connection | None = config.attributes.get("connection")
    if handed_over is not None:
        _run(handed_over)
        return

    engine = create_engine(_database_url(), poolclass=pool.NullPool, future=True)
    try:
        with engine.connect() as connection:
            _run(connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    log.info("Rendering migrations as SQL")
    run_migrations_offline()
else:
    run_migrations_online()
