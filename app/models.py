"""
app/models.py — Pydantic data schemas
Registration input/record, sheet writer results, API response bodies.
"""
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ──────────────────────────────────────────────────────────────────────────────
# Enumerations
# ──────────────────────────────────────────────────────────────────────────────

class RegistrationStatus(str, Enum):
    SINGLE = "single"
    COUPLE = "couple"


SHEET_HEADERS = ["Timestamp", "Name", "Email", "Phone", "Status", "Payment Status"]
DEFAULT_PAYMENT_STATUS = "Pending"


# ──────────────────────────────────────────────────────────────────────────────
# Registration
# ──────────────────────────────────────────────────────────────────────────────

class RegistrationInput(BaseModel):
    """Raw form submission. Values are untrusted and may be missing or non-strings."""
    model_config = ConfigDict(extra="ignore")

    name: Any = None
    email: Any = None
    phone: Any = None
    status: Any = None


class RegistrationRecord(BaseModel):
    """Validated, normalized registration. Built only by build_registration_record()."""
    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    phone: str = Field(pattern=r"^[0-9]{10}$")
    status: RegistrationStatus

    def to_row(self, timestamp: str) -> list[str]:
        return [
            timestamp,
            self.name,
            self.email,
            self.phone,
            self.status.value,
            DEFAULT_PAYMENT_STATUS,
        ]


# ──────────────────────────────────────────────────────────────────────────────
# Sheet writer results
# ──────────────────────────────────────────────────────────────────────────────

class SheetAppendResult(BaseModel):
    rows_updated: int
    range: str


class SheetConnectionResult(BaseModel):
    sheet_title: str
    sheet_id: str


class HeaderSetupResult(BaseModel):
    created: bool
    message: str


# ──────────────────────────────────────────────────────────────────────────────
# API responses
# ──────────────────────────────────────────────────────────────────────────────

class RegistrationData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: str
    status: RegistrationStatus
    submitted_at: str = Field(alias="submittedAt")


class RegistrationResponse(BaseModel):
    success: bool = True
    message: str = "Registration submitted successfully!"
    data: RegistrationData


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str = "ROOBAROO Backend is running!"
    timestamp: str
    environment: str

