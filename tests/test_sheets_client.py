"""
tests/test_sheets_client.py — Unit tests for the Google Sheets client
The Sheets service is a MagicMock; no network access.
"""
from __future__ import annotations

import json
from datetime import datetime
from unittest.mock import MagicMock

import httplib2
import pytest
import pytz
from googleapiclient.errors import HttpError

from app.clients.sheets_client import SheetsClient, classify_http_error
from app.config import Settings
from app.core.errors import (
    InvalidRangeError,
    PermissionDeniedError,
    QuotaExceededError,
    SheetConfigurationError,
    SheetNotFoundError,
    SheetTimeoutError,
    SheetUnknownError,
)
from app.models import SHEET_HEADERS, RegistrationRecord, RegistrationStatus


def _http_error(status: int, message: str) -> HttpError:
    resp = httplib2.Response({"status": status})
    content = json.dumps({"error": {"code": status, "message": message}}).encode("utf-8")
    return HttpError(resp, content)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        google_sheet_id="sheet-123",
        google_sheet_name="Form Responses",
        environment="testing",
    )


@pytest.fixture
def service() -> MagicMock:
    return MagicMock()


@pytest.fixture
def sheets(settings, service) -> SheetsClient:
    return SheetsClient(settings=settings, service=service)


@pytest.fixture
def record() -> RegistrationRecord:
    return RegistrationRecord(
        name="Jane Doe",
        email="jane@example.com",
        phone="9876543210",
        status=RegistrationStatus.COUPLE,
    )


# ──────────────────────────────────────────────────────────────────────────────
# Error classification
# ──────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("status,message,expected", [
    (403, "The caller does not have permission", PermissionDeniedError),
    (404, "Requested entity was not found.", SheetNotFoundError),
    (429, "Quota exceeded for quota metric 'Write requests'", QuotaExceededError),
    (403, "Quota exceeded for quota group", QuotaExceededError),
    (400, "Unable to parse range: Missing Tab!A:F", InvalidRangeError),
    (400, "Invalid value at 'data.values'", SheetUnknownError),
    (500, "Internal error encountered.", SheetUnknownError),
])
def test_classify_http_error(status, message, expected):
    error = classify_http_error(_http_error(status, message))
    assert type(error) is expected
    assert error.upstream_status == status


# ──────────────────────────────────────────────────────────────────────────────
# append_record
# ──────────────────────────────────────────────────────────────────────────────

def test_append_record_writes_row(sheets, service, record):
    append = service.spreadsheets.return_value.values.return_value.append
    append.return_value.execute.return_value = {
        "updates": {"updatedRows": 1, "updatedRange": "'Form Responses'!A2:F2"}
    }
    submitted_at = pytz.utc.localize(datetime(2026, 10, 17, 9, 30, 5))

    result = sheets.append_record(record, submitted_at)

    assert result.rows_updated == 1
    assert result.range == "'Form Responses'!A2:F2"
    kwargs = append.call_args.kwargs
    assert kwargs["spreadsheetId"] == "sheet-123"
    assert kwargs["range"] == "Form Responses!A:F"
    assert kwargs["valueInputOption"] == "USER_ENTERED"
    assert kwargs["body"]["values"] == [[
        "17/10/2026, 03:00:05 pm",
        "Jane Doe",
        "jane@example.com",
        "9876543210",
        "couple",
        "Pending",
    ]]


def test_append_record_raises_typed_error(sheets, service, record):
    append = service.spreadsheets.return_value.values.return_value.append
    append.return_value.execute.side_effect = _http_error(403, "The caller does not have permission")
    with pytest.raises(PermissionDeniedError):
        sheets.append_record(record)


def test_append_record_timeout(sheets, service, record):
    append = service.spreadsheets.return_value.values.return_value.append
    append.return_value.execute.side_effect = TimeoutError("timed out")
    with pytest.raises(SheetTimeoutError):
        sheets.append_record(record)


def test_missing_sheet_id_is_configuration_error(service, record):
    client = SheetsClient(settings=Settings(google_sheet_id=""), service=service)
    with pytest.raises(SheetConfigurationError):
        client.append_record(record)
    service.spreadsheets.assert_not_called()


def test_missing_credentials_is_configuration_error(settings, record):
    client = SheetsClient(settings=settings)
    with pytest.raises(SheetConfigurationError):
        client.append_record(record)


# ──────────────────────────────────────────────────────────────────────────────
# Headers / connection test
# ──────────────────────────────────────────────────────────────────────────────

def test_setup_headers_creates_when_empty(sheets, service):
    values = service.spreadsheets.return_value.values.return_value
    values.get.return_value.execute.return_value = {"range": "Form Responses!A1:F1"}
    values.update.return_value.execute.return_value = {}

    result = sheets.setup_sheet_headers()

    assert result.created is True
    assert values.update.call_args.kwargs["body"] == {"values": [SHEET_HEADERS]}


def test_setup_headers_skips_existing(sheets, service):
    values = service.spreadsheets.return_value.values.return_value
    values.get.return_value.execute.return_value = {"values": [SHEET_HEADERS]}

    result = sheets.setup_sheet_headers()

    assert result.created is False
    values.update.assert_not_called()


def test_connection(sheets, service):
    service.spreadsheets.return_value.get.return_value.execute.return_value = {
        "spreadsheetId": "sheet-123",
        "properties": {"title": "ROOBAROO Registrations"},
    }
    result = sheets.test_connection()
    assert result.sheet_title == "ROOBAROO Registrations"
    assert result.sheet_id == "sheet-123"
