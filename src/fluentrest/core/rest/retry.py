from __future__ import annotations

import errno
import logging
import time
from collections.abc import Callable
from enum import Enum
from http.client import IncompleteRead

import httpx

from .cancel import CancelToken
from .errors import ExhaustedRetriesError, RequestCancelledError, RetryableTransportError
from .result import Result

logger = logging.getLogger(__name__)

READ_SAFE_METHODS = frozenset({"GET"})


class AttemptState(str, Enum):
    SUCCESS = "success"
    FATAL = "fatal"
    RETRY = "retry"


def _exception_chain(exc: BaseException) -> list[BaseException]:
    chain: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and current not in chain:
        chain.append(current)
        current = current.__cause__ or current.__context__
    return chain


def is_connection_reset(exc: BaseException) -> bool:
    for item in _exception_chain(exc):
        if isinstance(item, ConnectionResetError):
            return True
        if isinstance(item, OSError) and item.errno == errno.ECONNRESET:
            return True
    return False


_INCOMPLETE_BODY_MARKERS = ("without sending complete message body", "incomplete chunked read")


def is_unexpected_eof(exc: BaseException) -> bool:
    """True when the peer hung up before the declared body was delivered.

    Other protocol violations (bad status line, illegal header) are not EOF.
    """
    for item in _exception_chain(exc):
        if isinstance(item, (IncompleteRead, EOFError)):
            return True
        if isinstance(item, httpx.RemoteProtocolError) and any(marker in str(item) for marker in _INCOMPLETE_BODY_MARKERS):
            return True
    return False


def classify(method: str, error: BaseException | None, *, reading_body: bool = False) -> AttemptState:
    """Decide whether one attempt succeeded, failed for good, or may be repeated.

    Only read-safe methods are ever repeated: a reset connection while sending, or a
    body cut short while reading, is retryable for GET and fatal for everything else.
    """
    if error is None:
        return AttemptState.SUCCESS
    if method.upper() not in READ_SAFE_METHODS:
        return AttemptState.FATAL
    if reading_body:
        return AttemptState.RETRY if is_unexpected_eof(error) else AttemptState.FATAL
    return AttemptState.RETRY if is_connection_reset(error) else AttemptState.FATAL


def _backoff_sleep(seconds: float) -> None:
    time.sleep(seconds)


def run_attempts(
    attempt: Callable[[], tuple[AttemptState, Result]],
    *,
    max_retries: int,
    retry_interval_s: float = 0.0,
    cancel: CancelToken | None = None,
) -> Result:
    """Run ``attempt`` once, then up to ``max_retries`` more times while it asks for a retry."""
    attempts = max(0, max_retries) + 1
    last: Result | None = None

    for index in range(attempts):
        if index > 0 and retry_interval_s > 0:
            if cancel is None:
                _backoff_sleep(retry_interval_s)
            elif cancel.wait(retry_interval_s):
                return Result(error=RequestCancelledError("request cancelled during retry backoff"))

        state, last = attempt()
        if state is not AttemptState.RETRY:
            return last

        if index + 1 < attempts:
            logger.warning(
                "Retrying request after transient failure",
                extra={"attempt": index + 1, "max_attempts": attempts, "error": last.error},
            )

    logger.warning("Request retries exhausted", extra={"attempt": attempts, "max_attempts": attempts})
    exhausted = ExhaustedRetriesError("unexpected error", attempts=attempts)
    if last is not None and isinstance(last.error, RetryableTransportError):
        exhausted.__cause__ = last.error
    return Result(error=exhausted)
