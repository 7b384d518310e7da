from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from fluentrest.core.rest import RestClient

BASE_URL = "https://api.example.com"


@pytest.fixture(autouse=True)
def clear_fluentrest_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "FLUENTREST_BASE_URL",
        "FLUENTREST_USERNAME",
        "FLUENTREST_PASSWORD",
        "FLUENTREST_MAX_RETRIES",
        "FLUENTREST_RETRY_INTERVAL_S",
        "FLUENTREST_TIMEOUT_S",
        "FLUENTREST_USER_AGENT",
        "FLUENTREST_LOG_FILE",
        "FLUENTREST_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def no_backoff_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("fluentrest.core.rest.retry._backoff_sleep", lambda _: None)


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], RestClient]:
    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> RestClient:
        return RestClient(httpx.Client(transport=httpx.MockTransport(handler)), BASE_URL)

    return factory
