"""
app/clients/sheets_client.py — Google Sheets API client
Service-account auth, row append, header setup, connection test.
Every upstream failure is raised as a typed SheetWriterError subclass.
"""
from __future__ import annotations

import time
from datetime import datetime
from functools import lru_cache
from typing import Any, Optional

import httplib2
from google.auth.exceptions import GoogleAuthError, RefreshError
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from loguru import logger

from app.config import Settings, get_settings
from app.core import logging as app_logging
from app.core.errors import (
    InvalidRangeError,
    PermissionDeniedError,
    QuotaExceededError,
    SheetConfigurationError,
    SheetNotFoundError,
    SheetTimeoutError,
    SheetUnknownError,
    SheetWriterError,
)
from app.models import (
    SHEET_HEADERS,
    HeaderSetupResult,
    RegistrationRecord,
    SheetAppendResult,
    SheetConnectionResult,
)
from app.utils.timezone import format_sheet_timestamp

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"

# Columns A..F: Timestamp, Name, Email, Phone, Status, Payment Status
DATA_COLUMNS = "A:F"
HEADER_RANGE = "A1:F1"


# ──────────────────────────────────────────────────────────────────────────────
# Error classification
# ──────────────────────────────────────────────────────────────────────────────

def classify_http_error(exc: HttpError) -> SheetWriterError:
    """Map a Sheets API HttpError onto the writer error taxonomy."""
    status = exc.resp.status
    reason = str(getattr(exc, "reason", "") or "")
    lowered = reason.lower()

    if status == 429 or (status == 403 and ("quota" in lowered or "rate limit" in lowered)):
        return QuotaExceededError(f"Sheets API quota exceeded: {reason}", status)
    if status == 403:
        return PermissionDeniedError(
            "Permission denied. Share the sheet with the service account email.", status
        )
    if status == 404:
        return SheetNotFoundError(
            "Google Sheet not found. Check GOOGLE_SHEET_ID.", status
        )
    if status == 400 and "unable to parse range" in lowered:
        return InvalidRangeError(
            "Invalid sheet name. Check GOOGLE_SHEET_NAME.", status
        )
    return SheetUnknownError(f"Sheets API error {status}: {reason}", status)


# ──────────────────────────────────────────────────────────────────────────────
# Client
# ──────────────────────────────────────────────────────────────────────────────

class SheetsClient:
    """Thin wrapper over the Sheets v4 `spreadsheets` resource."""

    def __init__(self, settings: Optional[Settings] = None, service: Any = None) -> None:
        self.settings = settings or get_settings()
        self._service = service

    # ── Credentials / service ────────────────────────────────────────────────

    def _build_credentials(self) -> service_account.Credentials:
        s = self.settings
        if not (s.google_service_account_email and s.google_private_key):
            raise SheetConfigurationError(
                "GOOGLE_SERVICE_ACCOUNT_EMAIL and GOOGLE_PRIVATE_KEY are required"
            )
        info = {
            "type": "service_account",
            "project_id": s.google_project_id,
            "client_email": s.google_service_account_email,
            "private_key": s.private_key_pem,
            "token_uri": TOKEN_URI,
        }
        try:
            return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
        except (ValueError, GoogleAuthError) as exc:
            raise SheetConfigurationError(f"Invalid service account credentials: {exc}") from exc

    @property
    def service(self) -> Any:
        if self._service is None:
            creds = self._build_credentials()
            http = AuthorizedHttp(
                creds, http=httplib2.Http(timeout=self.settings.sheets_timeout_seconds)
            )
            self._service = build("sheets", "v4", http=http, cache_discovery=False)
            logger.info("Google Sheets service initialized.")
        return self._service

    @property
    def spreadsheet_id(self) -> str:
        sheet_id = self.settings.google_sheet_id
        if not sheet_id:
            raise SheetConfigurationError("GOOGLE_SHEET_ID environment variable is required")
        return sheet_id

    def _range(self, cells: str) -> str:
        return f"{self.settings.google_sheet_name}!{cells}"

    def _execute(self, operation: str, sheet_range: str, build_request) -> dict[str, Any]:
        """Run one API request, logging latency and translating failures."""
        start = time.monotonic()
        try:
            response = build_request().execute()
        except (HttpError, RefreshError, TimeoutError) as exc:
            if isinstance(exc, HttpError):
                error = classify_http_error(exc)
            elif isinstance(exc, RefreshError):
                error = PermissionDeniedError(f"Service account token refresh failed: {exc}")
            else:
                error = SheetTimeoutError(
                    f"Sheets API timed out after {self.settings.sheets_timeout_seconds}s"
                )
            latency_ms = (time.monotonic() - start) * 1000
            app_logging.log_sheet_operation(operation, sheet_range, False, latency_ms, str(error))
            raise error from exc

        latency_ms = (time.monotonic() - start) * 1000
        app_logging.log_sheet_operation(operation, sheet_range, True, latency_ms)
        return response

    # ── Public API ───────────────────────────────────────────────────────────

    def append_record(
        self,
        record: RegistrationRecord,
        submitted_at: Optional[datetime] = None,
    ) -> SheetAppendResult:
        """Append one registration row; Payment Status starts as Pending."""
        spreadsheet_id = self.spreadsheet_id
        sheet_range = self._range(DATA_COLUMNS)
        row = record.to_row(format_sheet_timestamp(submitted_at))

        response = self._execute(
            "append",
            sheet_range,
            lambda: self.service.spreadsheets().values().append(
                spreadsheetId=spreadsheet_id,
                range=sheet_range,
                valueInputOption="USER_ENTERED",
                body={"values": [row]},
            ),
        )
        updates = response.get("updates", {})
        result = SheetAppendResult(
            rows_updated=updates.get("updatedRows", 0),
            range=updates.get("updatedRange", ""),
        )
        logger.info(f"Registration added to sheet: {result.rows_updated} row(s) updated")
        return result

    def setup_sheet_headers(self) -> HeaderSetupResult:
        """Write the header row if row 1 is empty. Safe to call repeatedly."""
        spreadsheet_id = self.spreadsheet_id
        header_range = self._range(HEADER_RANGE)

        existing = self._execute(
            "get",
            header_range,
            lambda: self.service.spreadsheets().values().get(
                spreadsheetId=spreadsheet_id, range=header_range
            ),
        )
        if existing.get("values"):
            return HeaderSetupResult(created=False, message="Headers already exist")

        self._execute(
            "update",
            header_range,
            lambda: self.service.spreadsheets().values().update(
                spreadsheetId=spreadsheet_id,
                range=header_range,
                valueInputOption="USER_ENTERED",
                body={"values": [SHEET_HEADERS]},
            ),
        )
        logger.info("Sheet headers created.")
        return HeaderSetupResult(created=True, message="Headers created")

    def test_connection(self) -> SheetConnectionResult:
        spreadsheet_id = self.spreadsheet_id
        response = self._execute(
            "metadata",
            spreadsheet_id,
            lambda: self.service.spreadsheets().get(spreadsheetId=spreadsheet_id),
        )
        title = response.get("properties", {}).get("title", "")
        logger.info(f"Connected to sheet: {title!r}")
        return SheetConnectionResult(
            sheet_title=title,
            sheet_id=response.get("spreadsheetId", spreadsheet_id),
        )


@lru_cache()
def get_sheets_client() -> SheetsClient:
    """Process-wide client; the discovery document is built once on first use."""
    return SheetsClient()
