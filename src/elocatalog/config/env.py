"""Reading settings from the process environment.

Blank values count as unset everywhere, so ``FOO=`` in a ``.env`` file behaves
like leaving ``FOO`` out.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable


def optional_env_var(name: str) -> str | None:
    value = (os.getenv(name) or "").strip()
    return value or None


def require_env_vars(names: Iterable[str]) -> dict[str, str]:
    """Return every named variable, or raise naming all of those that are unset."""

    found = {name: optional_env_var(name) for name in names}
    missing = sorted(name for name, value in found.items() if value is None)
    if missing:
        raise MissingConfigurationError(*missing)
    return {name: value for name, value in found.items() if value is not None}


def require_env_var(name: str) -> str:
    return require_env_vars((name,))[name]
