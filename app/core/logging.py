"""
app/core/logging.py — loguru structured JSON logging setup
Every registration, sheet call, rejection and error is logged as one JSON record.
"""
from __future__ import annotations

import json
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

from loguru import logger


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure loguru for structured JSON output to stdout.
    The hosting platform captures stdout and displays it in its dashboard.
    """
    # Remove default loguru handler
    logger.remove()

    logger.add(
        sys.stdout,
        level=log_level.upper(),
        format="{message}",
        serialize=True,
        backtrace=True,
        diagnose=False,  # never dump local variables (form data) into logs
        colorize=False,
    )


def _build_log_record(
    component: str,
    operation: str,
    extra: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Build a base structured log record."""
    record: dict[str, Any] = {
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "component": component,
        "operation": operation,
    }
    if extra:
        record.update(extra)
    return record


# ──────────────────────────────────────────────────────────────────────────────
# Event helpers
# ──────────────────────────────────────────────────────────────────────────────

def log_registration(
    name: str,
    email: str,
    status: str,
    stage: str,  # received | saved
    rows_updated: Optional[int] = None,
) -> None:
    """Registration lifecycle. Phone numbers are never logged."""
    record = _build_log_record("registration", stage, {
        "name": name,
        "email": email,
        "status": status,
        "rows_updated": rows_updated,
    })
    logger.info(json.dumps(record))


def log_sheet_operation(
    operation: str,  # append | get | update | metadata
    sheet_range: str,
    success: bool,
    latency_ms: float,
    error: Optional[str] = None,
) -> None:
    """Every Google Sheets API call."""
    record = _build_log_record("sheets_client", operation, {
        "range": sheet_range,
        "success": success,
        "latency_ms": round(latency_ms, 2),
        "error": error,
    })
    if success:
        logger.info(json.dumps(record))
    else:
        logger.warning(json.dumps(record))


def log_rate_limited(address: str, request_count: int, retry_after: int) -> None:
    record = _build_log_record("rate_limiter", "reject", {
        "client": address,
        "request_count": request_count,
        "retry_after": retry_after,
    })
    logger.warning(json.dumps(record))


def log_validation_failure(error: str, details: list[str]) -> None:
    record = _build_log_record("registration", "validation_failed", {
        "error": error,
        "details": details,
    })
    logger.info(json.dumps(record))


def log_error(
    component: str,
    operation: str,
    error: Exception,
    context: Optional[dict[str, Any]] = None,
) -> None:
    """Every error is logged with full context."""
    tb = "".join(
        traceback.format_exception(type(error), error, error.__traceback__)
    ) if error.__traceback__ else ""
    record = _build_log_record(component, operation, {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "stack_trace": tb[:2000] if tb else "",
        "context": context or {},
    })
    logger.error(json.dumps(record))
