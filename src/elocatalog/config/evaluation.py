"""Remote evaluation service configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import ResilienceConfig, RetryPolicy

DEFAULT_EVALUATION_TIMEOUT_SECONDS = 300.0


@dataclass(frozen=True, slots=True)
class EvaluationServiceConfig:
    resilience: ResilienceConfig


def _parse_timeout(raw: str | None) -> float:
    if raw is None:
        return DEFAULT_EVALUATION_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid EVALUATION_TIMEOUT_SECONDS: {raw}") from exc
    if value <= 0:
        raise ConfigurationError("EVALUATION_TIMEOUT_SECONDS must be positive")
    return value


def get_evaluation_config() -> EvaluationServiceConfig:
    values = require_env_vars(("EVALUATION_SERVICE_URL",))
    timeout = _parse_timeout(optional_env_var("EVALUATION_TIMEOUT_SECONDS"))
    return EvaluationServiceConfig(
        resilience=ResilienceConfig(
            name="evaluation",
            base_url=values["EVALUATION_SERVICE_URL"].rstrip("/"),
            timeout_seconds=timeout,
            retry=RetryPolicy(total=1),
            cache=None,
        )
    )
