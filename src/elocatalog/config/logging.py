"""Root logger setup for the command line."""

from __future__ import annotations

import logging

from .env import optional_env_var
from .errors import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# one line per request at INFO drowns out the catalog's own output
_CHATTY_LOGGERS = ("httpx", "httpcore", "hishel")


def resolve_log_level(default: int = logging.INFO) -> int:
    """Level named by ``ELOCATALOG_LOG_LEVEL`` (e.g. ``debug``), else ``default``."""

    name = optional_env_var("ELOCATALOG_LOG_LEVEL")
    if name is None:
        return default
    level = logging.getLevelNamesMapping().get(name.upper())
    if level is None:
        raise ConfigurationError(f"Unknown ELOCATALOG_LOG_LEVEL: {name}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once; ``force=True`` replaces existing handlers."""

    resolved = resolve_log_level() if level is None else level
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
