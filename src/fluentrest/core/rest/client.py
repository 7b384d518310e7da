from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from .request import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_INTERVAL_S, Method, Request

if TYPE_CHECKING:
    from fluentrest.core.config.loader import RestClientConfig


class RestClient:
    """Hands out independent :class:`Request` builders bound to one base URL and transport."""

    def __init__(
        self,
        http_client: httpx.Client,
        base_url: str,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_interval_s: float = DEFAULT_RETRY_INTERVAL_S,
    ) -> None:
        self.http_client = http_client
        self.base_url = base_url
        self.max_retries = max(0, max_retries)
        self.retry_interval_s = max(0.0, retry_interval_s)
        self._username = ""
        self._password = ""

    @classmethod
    def from_config(cls, config: RestClientConfig, http_client: httpx.Client | None = None) -> RestClient:
        if http_client is None:
            http_client = httpx.Client(timeout=config.timeout_s, headers={"User-Agent": config.user_agent})
        client = cls(
            http_client,
            config.base_url,
            max_retries=config.max_retries,
            retry_interval_s=config.retry_interval_s,
        )
        if config.username or config.password:
            client.set_basic_auth(config.username, config.password)
        return client

    def set_basic_auth(self, username: str, password: str) -> RestClient:
        self._username = username
        self._password = password
        return self

    def method(self, verb: str | Method) -> Request:
        return Request(
            self.http_client,
            str(verb.value if isinstance(verb, Method) else verb),
            self.base_url,
            username=self._username,
            password=self._password,
            max_retries=self.max_retries,
            retry_interval_s=self.retry_interval_s,
        )

    def get(self) -> Request:
        return self.method(Method.GET)

    def post(self) -> Request:
        return self.method(Method.POST)

    def put(self) -> Request:
        return self.method(Method.PUT)

    def patch(self) -> Request:
        return self.method(Method.PATCH)

    def delete(self) -> Request:
        return self.method(Method.DELETE)
