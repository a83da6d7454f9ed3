"""TheCloud provider configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .env import load_env_file, optional_env_var
from .errors import MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_ENDPOINT = "http://localhost:8080"
ENDPOINT_ENV_VAR = "THECLOUD_ENDPOINT"
API_KEY_ENV_VAR = "THECLOUD_API_KEY"
API_KEY_HEADER = "X-API-Key"
REQUEST_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Holds the endpoint and credential used for every control-plane call."""

    endpoint: str
    api_key: str
    resilience: ResilienceConfig

    def __repr__(self) -> str:
        return f"ProviderConfig(endpoint={self.endpoint!r}, api_key='***')"


def build_resilience_config(
    *,
    endpoint: str,
    api_key: str,
    retry: RetryPolicy | None = None,
    ratelimit: RateLimit | None = None,
) -> ResilienceConfig:
    return ResilienceConfig(
        name="thecloud",
        base_url=endpoint,
        timeout_seconds=REQUEST_TIMEOUT_SECONDS,
        retry=retry or RetryPolicy(),
        ratelimit=ratelimit,
        default_headers={
            API_KEY_HEADER: api_key,
            "Content-Type": "application/json",
        },
    )


def get_provider_config(
    *,
    endpoint: str | None = None,
    api_key: str | None = None,
    dotenv_path: str | Path | None = None,
    retry: RetryPolicy | None = None,
    ratelimit: RateLimit | None = None,
) -> ProviderConfig:
    """Resolve provider settings: explicit value, then environment, then default.

    When ``dotenv_path`` is given the file is loaded first; variables already present
    in the environment win over values from the file.
    """

    if dotenv_path is not None:
        load_env_file(dotenv_path)

    resolved_endpoint = _first_present(endpoint, optional_env_var(ENDPOINT_ENV_VAR))
    resolved_endpoint = (resolved_endpoint or DEFAULT_ENDPOINT).rstrip("/")

    resolved_key = _first_present(api_key, optional_env_var(API_KEY_ENV_VAR))
    if resolved_key is None:
        raise MissingConfigurationError(
            "Missing API Key: the provider cannot create a TheCloud client without an "
            f"API key. Set it via 'api_key' in the provider block or {API_KEY_ENV_VAR} "
            "environment variable.",
            names=(API_KEY_ENV_VAR,),
        )

    return ProviderConfig(
        endpoint=resolved_endpoint,
        api_key=resolved_key,
        resilience=build_resilience_config(
            endpoint=resolved_endpoint,
            api_key=resolved_key,
            retry=retry,
            ratelimit=ratelimit,
        ),
    )


def _first_present(*values: str | None) -> str | None:
    for value in values:
        if value is not None and value.strip():
            return value.strip()
    return None
