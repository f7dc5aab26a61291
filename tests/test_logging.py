"""
tests/test_logging.py — Structured log records from the event helpers
"""
from __future__ import annotations

import json

import pytest
from loguru import logger

from app.core.logging import log_error, log_rate_limited


@pytest.fixture
def captured():
    messages: list[str] = []
    sink_id = logger.add(messages.append, format="{message}", level="INFO")
    yield messages
    logger.remove(sink_id)


def _append_row():
    raise ValueError("sheet exploded")


def test_log_error_outside_except_block_keeps_traceback(captured):
    try:
        _append_row()
    except ValueError as exc:
        caught = exc

    log_error("registration", "append_record", caught, {"email": "a@b.com"})

    record = json.loads(captured[-1])
    assert record["component"] == "registration"
    assert record["error_type"] == "ValueError"
    assert record["error_message"] == "sheet exploded"
    assert record["context"] == {"email": "a@b.com"}
    assert "_append_row" in record["stack_trace"]
    assert "NoneType: None" not in record["stack_trace"]


def test_log_error_without_traceback(captured):
    log_error("sheets_client", "append", RuntimeError("never raised"))

    record = json.loads(captured[-1])
    assert record["error_type"] == "RuntimeError"
    assert record["stack_trace"] == ""


def test_rate_limited_record(captured):
    log_rate_limited("10.0.0.1", 11, 42)

    record = json.loads(captured[-1])
    assert record["operation"] == "reject"
    assert record["client"] == "10.0.0.1"
    assert record["retry_after"] == 42
