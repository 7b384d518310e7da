from .cancel import CancelToken
from .client import RestClient
from .errors import (
    ConfigurationError,
    DecodeError,
    EmptyBodyError,
    ExhaustedRetriesError,
    RequestCancelledError,
    RestError,
    RetryableTransportError,
    TransportError,
)
from .request import Method, Request
from .result import Result
from .retry import AttemptState, classify

__all__ = [
    "AttemptState",
    "CancelToken",
    "ConfigurationError",
    "DecodeError",
    "EmptyBodyError",
    "ExhaustedRetriesError",
    "Method",
    "Request",
    "RequestCancelledError",
    "RestClient",
    "RestError",
    "Result",
    "RetryableTransportError",
    "TransportError",
    "classify",
]
