"""
app/core/errors.py — Error taxonomy and HTTP mapping
Validation and rate-limit errors become 4xx responses.
Sheet writer errors are typed by the client and mapped to status + code here.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    PERMISSION_ERROR = "PERMISSION_ERROR"
    SHEET_NOT_FOUND = "SHEET_NOT_FOUND"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# ──────────────────────────────────────────────────────────────────────────────
# Request-level errors (recovered at the pipeline boundary)
# ──────────────────────────────────────────────────────────────────────────────

class RegistrationValidationError(Exception):
    """
    Raised with every violated rule of one validation pass.
    `error` is "Missing required fields" or "Validation failed".
    """

    def __init__(self, error: str, details: list[str]):
        super().__init__(f"{error}: {'; '.join(details)}")
        self.error = error
        self.details = details


class RateLimitedError(Exception):
    def __init__(self, retry_after: int):
        super().__init__(f"Rate limit exceeded, retry after {retry_after}s")
        self.retry_after = retry_after


# ──────────────────────────────────────────────────────────────────────────────
# Sheet writer errors
# ──────────────────────────────────────────────────────────────────────────────

class SheetWriterError(Exception):
    status_code: int = 500
    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    public_message: str = "Registration failed. Please try again later."

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class InvalidRangeError(SheetWriterError):
    """Tab name does not exist or the A1 range cannot be parsed."""


class SheetNotFoundError(SheetWriterError):
    code = ErrorCode.SHEET_NOT_FOUND
    public_message = "Server configuration error. Please contact support."


class PermissionDeniedError(SheetWriterError):
    code = ErrorCode.PERMISSION_ERROR
    public_message = "Server configuration error. Please contact support."


class QuotaExceededError(SheetWriterError):
    status_code = 503
    code = ErrorCode.QUOTA_EXCEEDED
    public_message = "Service temporarily unavailable. Please try again in a few minutes."


class SheetUnknownError(SheetWriterError):
    pass


class SheetTimeoutError(SheetUnknownError):
    status_code = 503
    public_message = "Service temporarily unavailable. Please try again in a few minutes."


class SheetConfigurationError(SheetUnknownError):
    """Required sheet settings (GOOGLE_SHEET_ID, credentials) are missing."""


def describe_sheet_error(exc: Exception) -> tuple[int, ErrorCode, str]:
    """Return (http_status, code, public_message) for any writer failure."""
    if isinstance(exc, SheetWriterError):
        return exc.status_code, exc.code, exc.public_message
    return 500, ErrorCode.INTERNAL_ERROR, SheetWriterError.public_message
