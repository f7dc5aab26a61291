"""
app/main.py — FastAPI application entry point
Includes: lifespan (logging, startup env check), CORS, security headers,
          registration rate limiter, JSON error envelopes ({"success": false, ...}).
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.core import logging as app_logging
from app.core.errors import RateLimitedError, RegistrationValidationError
from app.core.logging import setup_logging
from app.core.rate_limiter import FixedWindowRateLimiter, limiter
from app.routers import api

settings = get_settings()

NOT_FOUND_MESSAGE = (
    "Endpoint not found. Available endpoints: GET /api/health, POST /api/register"
)


# ──────────────────────────────────────────────────────────────────────────────
# Application Lifespan
# ──────────────────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging(settings.log_level)
    logger.info("ROOBAROO Backend starting up...")
    _validate_env()
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Registration limit: {settings.rate_limit} requests/minute per client")
    yield
    logger.info("Shutting down ROOBAROO Backend.")


def _validate_env() -> None:
    """Log missing Google settings loudly. The app still starts; /api/register will fail with a code."""
    required = [
        ("google_sheet_id", "GOOGLE_SHEET_ID"),
        ("google_service_account_email", "GOOGLE_SERVICE_ACCOUNT_EMAIL"),
        ("google_private_key", "GOOGLE_PRIVATE_KEY"),
    ]
    missing = [env_name for attr, env_name in required if not getattr(settings, attr, None)]
    if missing:
        logger.critical(f"Missing env vars: {', '.join(missing)}")
        logger.warning("Registrations cannot be saved until the Google credentials are set.")


# ──────────────────────────────────────────────────────────────────────────────
# FastAPI App
# ──────────────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="ROOBAROO Registration Backend",
    description="Accepts event registrations and appends them to a Google Sheet.",
    version="1.0.0",
    docs_url="/docs" if not settings.is_production else None,
    redoc_url=None,
    lifespan=lifespan,
)

# ── Rate limiting ─────────────────────────────────────────────────────────────
app.state.registration_limiter = FixedWindowRateLimiter(max_requests=settings.rate_limit)
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(RateLimitedError)
async def registration_rate_limited(request: Request, exc: RateLimitedError) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "Too many requests. Please try again later.",
            "retryAfter": exc.retry_after,
        },
        headers={"Retry-After": str(exc.retry_after)},
    )


@app.exception_handler(RateLimitExceeded)
async def diagnostics_rate_limited(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={"success": False, "error": "Rate limit exceeded. Slow down."},
    )


@app.exception_handler(RegistrationValidationError)
async def registration_invalid(request: Request, exc: RegistrationValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": exc.error, "details": exc.details},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unknown methods on known paths get the same 404 envelope as unknown paths
    if exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content={"success": False, "error": NOT_FOUND_MESSAGE})
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    app_logging.log_error("app", f"{request.method} {request.url.path}", exc)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error" if settings.is_production else str(exc),
        },
    )


# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


# ── Security headers ──────────────────────────────────────────────────────────
@app.middleware("http")
async def add_security_headers(request: Request, call_next) -> Response:
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "SAMEORIGIN"
    response.headers["X-XSS-Protection"] = "0"
    response.headers["Referrer-Policy"] = "no-referrer"
    response.headers["Cross-Origin-Resource-Policy"] = "same-origin"
    response.headers["X-DNS-Prefetch-Control"] = "off"
    if settings.is_production:
        response.headers["Strict-Transport-Security"] = (
            "max-age=15552000; includeSubDomains"
        )
    return response


# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(api.router, prefix="/api", tags=["api"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.port)
