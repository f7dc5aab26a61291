"""
app/core/rate_limiter.py — Rate limiting
Registration: fixed-window counter per client address, owned by the app instance.
Diagnostics: slowapi decorator limits.
"""
from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core import logging as app_logging
from app.core.errors import RateLimitedError

# Shared slowapi limiter — imported by main.py and routers
limiter = Limiter(key_func=get_remote_address)

RATE_LIMITS = {
    # /api/test-sheets hits the Google API on every call
    "diagnostics": "5/minute",
}

WINDOW_SECONDS = 60.0


@dataclass
class RateLimitEntry:
    request_count: int
    window_start: float


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after: int = 0
    remaining: int = 0


class FixedWindowRateLimiter:
    """
    Counts requests per address in windows that open on the address's first request.

    Up to 2x max_requests can pass across a window boundary; that burst is
    accepted behavior. State is in-process only and lost on restart.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def get_entry(self, address: str) -> Optional[RateLimitEntry]:
        return self._entries.get(address)

    def _sweep(self, now: float) -> None:
        expired = [
            address for address, entry in self._entries.items()
            if now - entry.window_start > self.window_seconds
        ]
        for address in expired:
            del self._entries[address]

    def check(self, address: str, sweep: bool = True) -> RateLimitDecision:
        """Record one request from `address` and decide whether it may proceed."""
        with self._lock:
            now = self._clock()
            if sweep:
                self._sweep(now)

            entry = self._entries.get(address)
            if entry is None:
                self._entries[address] = RateLimitEntry(1, now)
                return RateLimitDecision(True, remaining=self.max_requests - 1)

            elapsed = now - entry.window_start
            if elapsed >= self.window_seconds:
                self._entries[address] = RateLimitEntry(1, now)
                return RateLimitDecision(True, remaining=self.max_requests - 1)

            if entry.request_count >= self.max_requests:
                retry_after = max(1, math.ceil(self.window_seconds - elapsed))
                return RateLimitDecision(False, retry_after=retry_after)

            entry.request_count += 1
            return RateLimitDecision(
                True, remaining=self.max_requests - entry.request_count
            )

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()


# ──────────────────────────────────────────────────────────────────────────────
# FastAPI dependencies
# ──────────────────────────────────────────────────────────────────────────────

def get_registration_limiter(request: Request) -> FixedWindowRateLimiter:
    return request.app.state.registration_limiter


async def limit_registration(
    request: Request,
    registration_limiter: FixedWindowRateLimiter = Depends(get_registration_limiter),
) -> None:
    """Reject the request with RateLimitedError once its address is over budget."""
    address = get_remote_address(request)
    decision = registration_limiter.check(address)
    if not decision.allowed:
        entry = registration_limiter.get_entry(address)
        app_logging.log_rate_limited(
            address,
            entry.request_count if entry else registration_limiter.max_requests,
            decision.retry_after,
        )
        raise RateLimitedError(decision.retry_after)
