from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.support.fake_api import FakeCloudAPI, make_client_factory, make_provider_config
from thecloud.adapters.thecloud.client import TheCloudClient
from thecloud.config import API_KEY_ENV_VAR, ENDPOINT_ENV_VAR
from thecloud.domain.polling import PollPolicy
from thecloud.provider import TheCloudProvider

if TYPE_CHECKING:
    from thecloud.config import ProviderConfig


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    # setenv first so the undo step also removes values a dotenv file loaded
    for name in (ENDPOINT_ENV_VAR, API_KEY_ENV_VAR):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def fake_api() -> FakeCloudAPI:
    return FakeCloudAPI()


@pytest.fixture
def provider_config() -> ProviderConfig:
    return make_provider_config()


@pytest.fixture
def cloud_client(fake_api: FakeCloudAPI, provider_config: ProviderConfig) -> TheCloudClient:
    return TheCloudClient(provider_config, client_factory=make_client_factory(fake_api))


@pytest.fixture
def provider(fake_api: FakeCloudAPI, provider_config: ProviderConfig) -> TheCloudProvider:
    return TheCloudProvider(
        provider_config,
        client_factory=make_client_factory(fake_api),
        poll_policy=PollPolicy(interval_seconds=0.01, timeout_seconds=2.0),
    )
