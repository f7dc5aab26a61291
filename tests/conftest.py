"""
tests/conftest.py — Shared pytest fixtures
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from app.clients.sheets_client import get_sheets_client
from app.core.rate_limiter import FixedWindowRateLimiter, get_registration_limiter, limiter
from app.main import app
from app.models import RegistrationRecord, SheetAppendResult


class FakeClock:
    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSheetWriter:
    """Records appended rows instead of calling Google."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.records: list[RegistrationRecord] = []

    def append_record(
        self,
        record: RegistrationRecord,
        submitted_at: Optional[datetime] = None,
    ) -> SheetAppendResult:
        if self.error is not None:
            raise self.error
        self.records.append(record)
        row = len(self.records) + 1
        return SheetAppendResult(rows_updated=1, range=f"'Form Responses'!A{row}:F{row}")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(max_requests=10, window_seconds=60, clock=clock)


@pytest.fixture
def sheet_writer() -> FakeSheetWriter:
    return FakeSheetWriter()


@pytest.fixture
def client(rate_limiter, sheet_writer):
    app.dependency_overrides[get_registration_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_sheets_client] = lambda: sheet_writer
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.reset()


@pytest.fixture
def valid_payload() -> dict[str, str]:
    return {
        "name": "John Doe",
        "email": "john@example.com",
        "phone": "9876543210",
        "status": "single",
    }
