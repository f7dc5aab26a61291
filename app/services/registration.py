"""
app/services/registration.py — Registration pipeline
Order: (rate limit, in the router) → sanitize → validate → build record → sheet write.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, MutableMapping, Optional, Protocol

from app.core import logging as app_logging
from app.core.errors import RegistrationValidationError
from app.models import RegistrationRecord, RegistrationStatus, SheetAppendResult
from app.utils.sanitizer import sanitize_registration_data
from app.utils.validators import (
    is_valid_email,
    is_valid_name,
    is_valid_phone,
    is_valid_status,
    strip_non_digits,
)

MISSING_FIELD_MESSAGES = (
    ("name", "Name is required"),
    ("email", "Email is required"),
    ("phone", "Phone number is required"),
    ("status", "Status is required"),
)

FORMAT_RULES = (
    ("name", is_valid_name,
     "Name must be at least 2 characters long and contain only letters and spaces"),
    ("email", is_valid_email, "Please provide a valid email address"),
    ("phone", is_valid_phone, "Phone number must be exactly 10 digits"),
    ("status", is_valid_status, 'Status must be either "single" or "couple"'),
)


class SheetWriter(Protocol):
    def append_record(
        self,
        record: RegistrationRecord,
        submitted_at: Optional[datetime] = None,
    ) -> SheetAppendResult: ...


def validate_registration(data: MutableMapping[str, Any]) -> None:
    """
    Two passes. Missing fields are reported together; format rules run only
    when nothing is missing, and every failing rule is reported.
    Raises RegistrationValidationError.
    """
    missing = [message for field, message in MISSING_FIELD_MESSAGES if not data.get(field)]
    if missing:
        raise RegistrationValidationError("Missing required fields", missing)

    invalid = [message for field, check, message in FORMAT_RULES if not check(data[field])]
    if invalid:
        raise RegistrationValidationError("Validation failed", invalid)


def build_registration_record(data: MutableMapping[str, Any]) -> RegistrationRecord:
    """Validate already-sanitized data and normalize it into a RegistrationRecord."""
    validate_registration(data)
    return RegistrationRecord(
        name=data["name"].strip(),
        email=data["email"].strip().lower(),
        phone=strip_non_digits(data["phone"]),
        status=RegistrationStatus(data["status"].lower()),
    )


def submit_registration(
    data: MutableMapping[str, Any],
    writer: SheetWriter,
    submitted_at: Optional[datetime] = None,
) -> tuple[RegistrationRecord, SheetAppendResult]:
    """
    Sanitize, validate and write one submission.
    `data` is mutated in place by sanitization.
    Sheet errors propagate unchanged to the caller.
    """
    sanitize_registration_data(data)
    try:
        record = build_registration_record(data)
    except RegistrationValidationError as exc:
        app_logging.log_validation_failure(exc.error, exc.details)
        raise

    app_logging.log_registration(
        record.name, record.email, record.status.value, "received"
    )
    result = writer.append_record(record, submitted_at)
    app_logging.log_registration(
        record.name, record.email, record.status.value, "saved", result.rows_updated
    )
    return record, result
