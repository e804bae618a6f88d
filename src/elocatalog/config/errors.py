"""Errors raised while assembling configuration."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting is present but unusable, e.g. a non-numeric timeout."""


class MissingConfigurationError(ConfigurationError):
    """One or more required environment variables are unset or blank."""

    def __init__(self, *names: str) -> None:
        self.names = names
        super().__init__(f"Missing configuration for: {', '.join(names)}")
