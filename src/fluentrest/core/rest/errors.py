from __future__ import annotations


class RestError(RuntimeError):
    """Base error for the request pipeline."""


class ConfigurationError(RestError):
    """Raised when a request was configured with a bad base URL, sub-path or body."""


class TransportError(RestError):
    pass


class RetryableTransportError(TransportError):
    """Connection reset or truncated body on a read-safe request."""


class RequestCancelledError(TransportError):
    pass


class ExhaustedRetriesError(RestError):
    def __init__(self, message: str = "unexpected error", attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts


class DecodeError(RestError):
    def __init__(self, message: str, raw_body: bytes = b"") -> None:
        super().__init__(message)
        self.raw_body = raw_body


class EmptyBodyError(DecodeError):
    pass
