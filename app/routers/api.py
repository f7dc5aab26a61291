"""
app/routers/api.py — Public API endpoints
Endpoints: /api/health, /api/register (GET info, POST submit), /api/test-sheets
Registration is rate limited per client address before the body is even read.
"""

import json
from typing import Any
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from loguru import logger

from app.clients.sheets_client import SheetsClient, get_sheets_client
from app.config import get_settings
from app.core import logging as app_logging
from app.core.errors import RegistrationValidationError, describe_sheet_error
from app.core.rate_limiter import RATE_LIMITS, limit_registration, limiter
from app.models import (
    HealthResponse,
    RegistrationData,
    RegistrationInput,
    RegistrationResponse,
)
from app.services.registration import SheetWriter, submit_registration
from app.utils.timezone import iso_utc, utc_now
from app.utils.validators import STATUS_OPTIONS

router = APIRouter()
settings = get_settings()


# ──────────────────────────────────────────────────────────────────────────────
# Request body — JSON or URL-encoded form
# ──────────────────────────────────────────────────────────────────────────────

async def read_registration_body(request: Request) -> dict[str, Any]:
    """
    Parse the submission without validating it; unknown keys are dropped.
    A body that is not an object counts as empty, so every field is reported missing.
    """
    content_type = request.headers.get("content-type", "")
    raw = await _read_limited_body(request, settings.max_body_bytes)
    if not raw.strip():
        return RegistrationInput().model_dump()

    if content_type.startswith("application/x-www-form-urlencoded"):
        payload: Any = dict(parse_qsl(raw.decode("utf-8", errors="replace")))
    else:
        try:
            payload = json.loads(raw)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid request body",
            )

    if not isinstance(payload, dict):
        payload = {}
    return RegistrationInput.model_validate(payload).model_dump()


async def _read_limited_body(request: Request, max_bytes: int) -> bytes:
    """Read the body, raising 413 as soon as it is known to exceed max_bytes."""
    too_large = HTTPException(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        detail="Request body too large",
    )
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        raise too_large

    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_bytes:
            raise too_large
        chunks.append(chunk)
    return b"".join(chunks)


# ──────────────────────────────────────────────────────────────────────────────
# GET /api/health — public, no external calls
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(timestamp=iso_utc(), environment=settings.environment)


# ──────────────────────────────────────────────────────────────────────────────
# GET /api/register — usage info for whoever builds the form
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/register")
async def registration_info() -> dict[str, Any]:
    return {
        "message": "ROOBAROO Registration API",
        "method": "POST",
        "endpoint": "/api/register",
        "requiredFields": ["name", "email", "phone", "status"],
        "statusOptions": list(STATUS_OPTIONS),
        "example": {
            "name": "John Doe",
            "email": "john@example.com",
            "phone": "9876543210",
            "status": "single",
        },
    }


# ──────────────────────────────────────────────────────────────────────────────
# POST /api/register
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/register",
    response_model=RegistrationResponse,
    dependencies=[Depends(limit_registration)],
)
async def register(
    data: dict[str, Any] = Depends(read_registration_body),
    writer: SheetWriter = Depends(get_sheets_client),
):
    """
    Save one registration to the sheet.
    400 on validation failure (handled in main.py), 429 from the rate limit
    dependency, 500/503 with a code when the sheet write fails.
    """
    submitted_at = utc_now()
    try:
        record, _ = await run_in_threadpool(submit_registration, data, writer, submitted_at)
    except RegistrationValidationError:
        raise
    except Exception as exc:
        app_logging.log_error("registration", "append_record", exc, {
            "email": data.get("email"),
        })
        status_code, code, message = describe_sheet_error(exc)
        content: dict[str, Any] = {"success": False, "error": message, "code": code.value}
        if not settings.is_production:
            content["details"] = str(exc)
        return JSONResponse(status_code=status_code, content=content)

    return RegistrationResponse(
        data=RegistrationData(
            name=record.name,
            email=record.email,
            status=record.status,
            submitted_at=iso_utc(submitted_at),
        )
    )


# ──────────────────────────────────────────────────────────────────────────────
# GET /api/test-sheets — setup diagnostics, creates the header row if missing
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/test-sheets")
@limiter.limit(RATE_LIMITS["diagnostics"])
async def test_sheets(
    request: Request,
    client: SheetsClient = Depends(get_sheets_client),
) -> Any:
    logger.info("Testing Google Sheets connection...")
    try:
        connection = await run_in_threadpool(client.test_connection)
        headers = await run_in_threadpool(client.setup_sheet_headers)
    except Exception as exc:
        app_logging.log_error("sheets_client", "test_connection", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": "Google Sheets connection failed",
                "details": "See server logs" if settings.is_production else str(exc),
                "troubleshooting": {
                    "checkList": [
                        "1. Verify GOOGLE_SHEET_ID in .env file",
                        "2. Ensure service account has access to the sheet",
                        "3. Check that all Google credentials are correct",
                        "4. Make sure Google Sheets API is enabled in Google Cloud Console",
                    ]
                },
            },
        )

    return {
        "success": True,
        "message": "Google Sheets connection successful",
        "connection": {
            "success": True,
            "sheetTitle": connection.sheet_title,
            "sheetId": connection.sheet_id,
        },
        "headers": {"success": True, "message": headers.message},
    }
