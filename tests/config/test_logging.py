from __future__ import annotations

import logging

import pytest

from elocatalog.config import ConfigurationError
from elocatalog.config.logging import configure_logging, resolve_log_level


def test_log_level_defaults_to_info(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ELOCATALOG_LOG_LEVEL", raising=False)

    assert resolve_log_level() == logging.INFO


def test_log_level_is_read_case_insensitively(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ELOCATALOG_LOG_LEVEL", " debug ")

    assert resolve_log_level() == logging.DEBUG


def test_unknown_log_level_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ELOCATALOG_LOG_LEVEL", "chatty")

    with pytest.raises(ConfigurationError, match="chatty"):
        resolve_log_level()


def test_configure_logging_quiets_http_libraries() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(level=logging.DEBUG, force=True)

        assert root.level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
