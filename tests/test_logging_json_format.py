from __future__ import annotations

import io
import json
import logging

from fluentrest.core.logging.context import log_context
from fluentrest.core.logging.setup import RequestLogFormatter


def _capture(name: str) -> tuple[logging.Logger, logging.Handler, io.StringIO]:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(RequestLogFormatter())
    logger = logging.getLogger(name)
    logger.addHandler(handler)
    return logger, handler, stream


def test_pipeline_fields_lifted_and_redacted() -> None:
    logger, handler, stream = _capture("fluentrest.test.json")
    logger.setLevel(logging.INFO)

    try:
        with log_context(correlation_id="c1", request_id="r1"):
            logger.info(
                "Sending request",
                extra={
                    "method": "GET",
                    "url": "https://u:pw@api.example.com/items?token=abc&page=2",
                    "attempt": 2,
                    "headers": [("Authorization", "Basic dXNlcjpwdw=="), ("Accept", "application/json")],
                },
            )
    finally:
        logger.removeHandler(handler)

    payload = json.loads(stream.getvalue().strip())
    assert payload["msg"] == "Sending request"
    assert payload["level"] == "INFO"
    assert payload["correlation_id"] == "c1"
    assert payload["request_id"] == "r1"
    assert payload["method"] == "GET"
    assert payload["attempt"] == 2
    assert payload["url"] == "https://api.example.com/items?token=***&page=2"
    assert payload["headers"] == {"Authorization": "***", "Accept": "application/json"}
    assert "ts" in payload


def test_exception_reported_as_type_and_message() -> None:
    logger, handler, stream = _capture("fluentrest.test.exc")

    try:
        try:
            raise ValueError("secret=hunter2 rejected")
        except ValueError:
            logger.error("failed", exc_info=True)
    finally:
        logger.removeHandler(handler)

    payload = json.loads(stream.getvalue().strip())
    assert payload["error_type"] == "ValueError"
    assert payload["error"] == "secret=*** rejected"


def test_retry_warnings_carry_request_id_and_attempt(make_client) -> None:
    logger, handler, stream = _capture("fluentrest.core.rest.retry")

    def reset(request):
        raise ConnectionResetError()

    try:
        make_client(reset).get().with_max_retry(1).do()
    finally:
        logger.removeHandler(handler)

    lines = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert [line["msg"] for line in lines] == ["Retrying request after transient failure", "Request retries exhausted"]
    assert lines[0]["request_id"] == lines[1]["request_id"]
    assert lines[0]["attempt"] == 1
    assert lines[0]["max_attempts"] == 2
    assert "error" in lines[0]
