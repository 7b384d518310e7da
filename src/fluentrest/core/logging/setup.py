"""JSON log lines for the request pipeline.

Pipeline code logs with plain ``extra={"method": ..., "url": ..., "attempt": ...}``
keywords. :class:`RequestLogFormatter` lifts those attributes into the JSON line,
adds the bound log context and redacts URLs, headers and error text on the way out.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .context import get_log_context
from .redact import redact_headers, redact_string, redact_url

_LOGGER_NAME = "fluentrest"
_HANDLER_ATTR = "_fluentrest_handler"
_FILE_MAX_BYTES = 5_000_000
_FILE_BACKUP_COUNT = 3

_PIPELINE_FIELDS = ("method", "url", "status_code", "attempt", "max_attempts", "bytes", "headers", "error")


def _render_field(name: str, value: object) -> object:
    if name == "url":
        return redact_url(str(value))
    if name == "headers":
        return dict(redact_headers(value))  # type: ignore[arg-type]
    if name == "error":
        return redact_string(str(value))
    return value


class RequestLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(get_log_context())
        for name in _PIPELINE_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = _render_field(name, value)

        if record.exc_info and record.exc_info[0] is not None:
            payload["error_type"] = record.exc_info[0].__name__
            payload.setdefault("error", redact_string(str(record.exc_info[1])))

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def _level(value: str | int | None) -> int:
    if isinstance(value, int):
        return value
    raw = value if value is not None else os.getenv("FLUENTREST_LOG_LEVEL", "WARNING")
    return getattr(logging, raw.strip().upper(), logging.WARNING)


def _tagged(handler: logging.Handler, kind: str) -> logging.Handler:
    handler.setFormatter(RequestLogFormatter())
    setattr(handler, _HANDLER_ATTR, kind)
    return handler


def configure_logging(level: str | int | None = None, *, log_file: Path | None = None) -> logging.Logger:
    """Attach JSON handlers to the ``fluentrest`` logger; calling it again only updates the level.

    ``log_file`` (or ``FLUENTREST_LOG_FILE``) adds a rotating file handler next to the
    stderr one.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(_level(level))
    logger.propagate = False
    kinds = {getattr(handler, _HANDLER_ATTR, None) for handler in logger.handlers}

    if "stream" not in kinds:
        logger.addHandler(_tagged(logging.StreamHandler(stream=sys.stderr), "stream"))

    configured_file = log_file or (Path(os.environ["FLUENTREST_LOG_FILE"]) if os.getenv("FLUENTREST_LOG_FILE") else None)
    if configured_file is not None and "file" not in kinds:
        configured_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(configured_file, maxBytes=_FILE_MAX_BYTES, backupCount=_FILE_BACKUP_COUNT, encoding="utf-8")
        logger.addHandler(_tagged(handler, "file"))

    return logger
