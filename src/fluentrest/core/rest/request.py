from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping, Sequence
from datetime import timedelta
from enum import Enum
from typing import Any, Union

import httpx
from pydantic import TypeAdapter

from fluentrest.core.logging.context import log_context
from fluentrest.core.logging.redact import redact_url

from .cancel import CancelToken
from .errors import ConfigurationError, RequestCancelledError, RestError, RetryableTransportError, TransportError
from .result import Result
from .retry import AttemptState, classify, run_attempts
from .url import compose_url

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 0
DEFAULT_RETRY_INTERVAL_S = 0.02

_FORCED_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "Accept-Charset": "utf-8",
}
_STRIPPED_HEADERS = ("Accept-Encoding",)

_JSON_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)

Duration = Union[float, int, timedelta]
HeaderInput = Union[httpx.Headers, Mapping[str, Union[str, Sequence[str]]], Sequence[tuple[str, str]]]


class Method(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


def _seconds(value: Duration | None) -> float | None:
    if value is None:
        return None
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def _header_items(headers: HeaderInput) -> list[tuple[str, str]]:
    if isinstance(headers, httpx.Headers):
        return list(headers.multi_items())
    if isinstance(headers, Mapping):
        items: list[tuple[str, str]] = []
        for key, value in headers.items():
            if isinstance(value, (list, tuple)):
                items.extend((key, str(item)) for item in value)
            else:
                items.append((key, str(value)))
        return items
    return [(str(key), str(value)) for key, value in headers]


def _wrap(error_cls: type[RestError], message: str, cause: BaseException) -> RestError:
    error = error_cls(message)
    error.__cause__ = cause
    return error


class Request:
    """Chainable request configuration for a single logical call.

    Setters never raise. A configuration problem is recorded once and returned by
    :meth:`do` without touching the network.
    """

    def __init__(
        self,
        client: httpx.Client,
        method: str,
        base_url: str,
        *,
        username: str = "",
        password: str = "",
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_interval_s: float = DEFAULT_RETRY_INTERVAL_S,
    ) -> None:
        self._client = client
        self.method = Method(method.upper()).value
        self._base_url = base_url
        self._params: dict[str, list[str]] = {}
        self._headers: list[tuple[str, str]] | None = None
        self._body = b""
        self._cancel: CancelToken | None = None
        self._sub_path = ""
        self._sub_path_args: tuple[object, ...] = ()
        self._timeout_s: float | None = None
        self._max_retries = max(0, int(max_retries))
        self._retry_interval_s = max(0.0, retry_interval_s)
        self._username = username
        self._password = password
        self._error: ConfigurationError | None = None

    @property
    def error(self) -> ConfigurationError | None:
        return self._error

    def _fail(self, error: ConfigurationError) -> None:
        if self._error is None:
            self._error = error

    def with_param(self, name: str, value: object) -> Request:
        self._params.setdefault(name, []).append(str(value))
        return self

    def with_params(self, params: Mapping[str, object]) -> Request:
        for name, value in params.items():
            self.with_param(name, value)
        return self

    def with_header(self, headers: HeaderInput) -> Request:
        items = _header_items(headers)
        if self._headers is None:
            self._headers = items
        else:
            self._headers.extend(items)
        return self

    def with_context(self, cancel: CancelToken | None) -> Request:
        self._cancel = cancel
        return self

    def with_timeout(self, timeout: Duration | None) -> Request:
        seconds = _seconds(timeout)
        self._timeout_s = seconds if seconds is not None and seconds > 0 else None
        return self

    def with_max_retry(self, count: int) -> Request:
        self._max_retries = max(0, int(count))
        return self

    def with_retry_interval(self, interval: Duration) -> Request:
        self._retry_interval_s = max(0.0, _seconds(interval) or 0.0)
        return self

    def with_basic_auth(self, username: str, password: str) -> Request:
        self._username = username
        self._password = password
        return self

    def sub_resourcef(self, sub_path: str, *args: object) -> Request:
        self._sub_path = sub_path.lstrip("/")
        self._sub_path_args = args
        return self

    def sub_resource(self, sub_path: str) -> Request:
        return self.sub_resourcef(sub_path)

    def body(self, value: Any) -> Request:
        if value is None:
            self._body = b""
            return self
        try:
            self._body = _JSON_ADAPTER.dump_json(value)
        except (TypeError, ValueError) as exc:
            self._fail(_wrap(ConfigurationError, f"request body is not JSON serializable: {exc}", exc))
            self._body = b""
        return self

    def url(self) -> str:
        return compose_url(self._base_url, self._sub_path, self._sub_path_args, self._params, self._timeout_s)

    def do(self) -> Result:
        with log_context(request_id=uuid.uuid4().hex[:12]):
            if self._error is not None:
                logger.debug("Request not sent, configuration error", extra={"method": self.method, "error": self._error})
                return Result(error=self._error)
            return run_attempts(
                self._attempt,
                max_retries=self._max_retries,
                retry_interval_s=self._retry_interval_s,
                cancel=self._cancel,
            )

    def _attempt_token(self) -> CancelToken | None:
        if not self._timeout_s:
            return self._cancel
        if self._cancel is None:
            return CancelToken(self._timeout_s)
        return self._cancel.with_timeout(self._timeout_s)

    def _wire_headers(self) -> httpx.Headers:
        headers = httpx.Headers(self._headers or [])
        for name in _STRIPPED_HEADERS:
            if name in headers:
                del headers[name]
        for name, value in _FORCED_HEADERS.items():
            headers[name] = value
        return headers

    def _attempt(self) -> tuple[AttemptState, Result]:
        try:
            url = self.url()
        except ConfigurationError as exc:
            self._fail(exc)
            return AttemptState.FATAL, Result(error=exc)

        token = self._attempt_token()
        if token is not None and token.cancelled:
            return AttemptState.FATAL, Result(error=RequestCancelledError(f"request cancelled before sending {self.method}"))
        remaining = token.remaining() if token is not None else None
        timeout = httpx.Timeout(remaining) if remaining is not None else httpx.USE_CLIENT_DEFAULT

        try:
            request = self._client.build_request(self.method, url, content=self._body, headers=self._wire_headers(), timeout=timeout)
        except (httpx.InvalidURL, ValueError) as exc:
            error = _wrap(ConfigurationError, f"cannot build request for {redact_url(url)}: {exc}", exc)
            self._fail(error)
            return AttemptState.FATAL, Result(error=error)

        auth = httpx.BasicAuth(self._username, self._password) if self._username or self._password else httpx.USE_CLIENT_DEFAULT
        logger.debug("Sending request", extra={"method": self.method, "url": url, "headers": request.headers.multi_items()})

        try:
            response = self._client.send(request, auth=auth, stream=True)
        except (httpx.HTTPError, OSError) as exc:
            return self._failed(exc, f"{self.method} {redact_url(url)} failed: {exc}", reading_body=False)

        chunks: list[bytes] = []
        try:
            if token is not None and token.cancelled:
                return self._cancelled(url)
            for chunk in response.iter_bytes():
                # the httpx timeout bounds each read; the token bounds the whole attempt
                if token is not None and token.cancelled:
                    return self._cancelled(url)
                chunks.append(chunk)
        except (httpx.HTTPError, OSError) as exc:
            return self._failed(exc, f"reading response body of {self.method} {redact_url(url)} failed: {exc}", reading_body=True)
        finally:
            response.close()

        body = b"".join(chunks)
        logger.debug("Received response", extra={"method": self.method, "status_code": response.status_code, "bytes": len(body)})
        return AttemptState.SUCCESS, Result(body=body, status_code=response.status_code)

    def _cancelled(self, url: str) -> tuple[AttemptState, Result]:
        return AttemptState.FATAL, Result(error=RequestCancelledError(f"{self.method} {redact_url(url)} cancelled while reading the response"))

    def _failed(self, exc: BaseException, message: str, *, reading_body: bool) -> tuple[AttemptState, Result]:
        state = classify(self.method, exc, reading_body=reading_body)
        error_cls = RetryableTransportError if state is AttemptState.RETRY else TransportError
        return state, Result(error=_wrap(error_cls, message, exc))
