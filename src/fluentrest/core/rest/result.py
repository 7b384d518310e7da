from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .errors import DecodeError, EmptyBodyError, RestError


@dataclass(frozen=True)
class Result:
    """Outcome of one request execution.

    ``status_code`` is reported as received; interpreting non-2xx codes is left to the
    caller. When ``error`` is set, ``body`` and ``status_code`` carry no meaning.
    """

    body: bytes = b""
    status_code: int = 0
    error: RestError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def decode(self, target: Any = None) -> Any:
        """Parse the stored body as JSON into ``target`` and return the value.

        ``target`` is anything pydantic can validate: a model class, ``dict[str, int]``,
        ``list[Model]`` and so on. With no target the body is ignored and ``None`` is
        returned. Raises the stored error unchanged, :class:`EmptyBodyError` when there
        is nothing to decode, or :class:`DecodeError` carrying the raw body.
        """
        if self.error is not None:
            raise self.error
        if target is None:
            return None
        if not self.body:
            raise EmptyBodyError(f"http response body is empty (status {self.status_code})", raw_body=self.body)
        try:
            return TypeAdapter(target).validate_json(self.body)
        except ValidationError as exc:
            raise DecodeError(f"http response body decode error: {exc}, raw data: {self.text}", raw_body=self.body) from exc
