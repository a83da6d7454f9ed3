from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from thecloud.config import (
    API_KEY_ENV_VAR,
    DEFAULT_ENDPOINT,
    ENDPOINT_ENV_VAR,
    MissingConfigurationError,
    RateLimit,
    get_provider_config,
)

if TYPE_CHECKING:
    from pathlib import Path


def test_explicit_values_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ENDPOINT_ENV_VAR, "http://env.example")
    monkeypatch.setenv(API_KEY_ENV_VAR, "env-key")

    config = get_provider_config(endpoint="http://explicit.example/", api_key="explicit-key")

    assert config.endpoint == "http://explicit.example"
    assert config.api_key == "explicit-key"


def test_environment_fills_missing_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ENDPOINT_ENV_VAR, "http://env.example")
    monkeypatch.setenv(API_KEY_ENV_VAR, "env-key")

    config = get_provider_config()

    assert config.endpoint == "http://env.example"
    assert config.api_key == "env-key"


def test_endpoint_defaults_to_localhost() -> None:
    config = get_provider_config(api_key="key")

    assert config.endpoint == DEFAULT_ENDPOINT


def test_missing_api_key_raises() -> None:
    with pytest.raises(MissingConfigurationError) as exc:
        get_provider_config(endpoint="http://example")

    assert "Missing API Key" in str(exc.value)
    assert API_KEY_ENV_VAR in str(exc.value)
    assert exc.value.names == (API_KEY_ENV_VAR,)


def test_blank_api_key_counts_as_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(API_KEY_ENV_VAR, "   ")

    with pytest.raises(MissingConfigurationError):
        get_provider_config()


def test_dotenv_file_supplies_values(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(f"{API_KEY_ENV_VAR}=file-key\n{ENDPOINT_ENV_VAR}=http://file.example\n")

    config = get_provider_config(dotenv_path=env_file)

    assert config.api_key == "file-key"
    assert config.endpoint == "http://file.example"


def test_dotenv_file_does_not_override_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv(API_KEY_ENV_VAR, "env-key")
    env_file = tmp_path / ".env"
    env_file.write_text(f"{API_KEY_ENV_VAR}=file-key\n")

    config = get_provider_config(dotenv_path=env_file)

    assert config.api_key == "env-key"


def test_resilience_config_carries_auth_headers() -> None:
    config = get_provider_config(
        endpoint="http://example", api_key="secret", ratelimit=RateLimit(10, 1.0)
    )

    headers = dict(config.resilience.default_headers or {})
    assert headers["X-API-Key"] == "secret"
    assert headers["Content-Type"] == "application/json"
    assert config.resilience.base_url == "http://example"
    assert config.resilience.ratelimit == RateLimit(10, 1.0)


def test_repr_masks_api_key() -> None:
    config = get_provider_config(endpoint="http://example", api_key="secret")

    assert "secret" not in repr(config)
