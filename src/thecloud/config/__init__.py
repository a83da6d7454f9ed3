"""Provider configuration helpers."""

from __future__ import annotations

from .env import load_env_file, optional_env_var
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .provider import (
    API_KEY_ENV_VAR,
    DEFAULT_ENDPOINT,
    ENDPOINT_ENV_VAR,
    ProviderConfig,
    build_resilience_config,
    get_provider_config,
)

__all__ = [
    "API_KEY_ENV_VAR",
    "DEFAULT_ENDPOINT",
    "ENDPOINT_ENV_VAR",
    "ConfigurationError",
    "MissingConfigurationError",
    "ProviderConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "build_resilience_config",
    "configure_logging",
    "get_provider_config",
    "load_env_file",
    "optional_env_var",
]
