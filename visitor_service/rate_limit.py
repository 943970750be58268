"""
rate_limit.py — Per-client admission control for write endpoints
=================================================================
Fixed-window counter keyed by client address. Each key may make
``max_requests`` requests per window; the window starts with the key's
first request and restarts on the first request after it expires.
Requests arriving either side of a window boundary can briefly let
through close to twice the ceiling.

State is process-local and lost on restart. A background sweep, owned
by the application lifespan, evicts expired entries every window.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Optional

from fastapi import Request

from .errors import RateLimitExceeded

log = logging.getLogger("visitor_service.rate_limit")

UNKNOWN_CLIENT = "unknown"


@dataclass
class RateLimitEntry:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = Lock()
        self._sweeper: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[RateLimitEntry]:
        return self._entries.get(key)

    def hit(self, key: str) -> None:
        """
        Count one request for ``key``.

        Raises RateLimitExceeded when the key is already at the ceiling;
        a rejected request is not counted.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or now > entry.reset_at:
                self._entries[key] = RateLimitEntry(count=1, reset_at=now + self.window_seconds)
                return
            if entry.count >= self.max_requests:
                retry_after = entry.reset_at - now
            else:
                entry.count += 1
                return

        log.warning("Rate limit exceeded for %s", key)
        raise RateLimitExceeded(key, retry_after)

    def sweep(self) -> int:
        """Drop every entry whose window has passed. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now > entry.reset_at]
            for key in expired:
                del self._entries[key]
        if expired:
            log.debug("Swept %d expired rate limit entries", len(expired))
        return len(expired)

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()

    # ------------------------------------------------------------------
    # Periodic sweep
    # ------------------------------------------------------------------

    async def _run_sweeper(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.sweep()

    def start_sweeper(self, interval: Optional[float] = None) -> asyncio.Task:
        """Schedule the sweep on the running loop, once per window by default."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(
                self._run_sweeper(interval or self.window_seconds)
            )
        return self._sweeper

    async def stop_sweeper(self) -> None:
        task, self._sweeper = self._sweeper, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    @property
    def sweeper_running(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()


def client_address(request: Request, trust_forwarded: bool = False) -> str:
    """Rate-limit key for a request: the peer address, or ``"unknown"``."""
    if trust_forwarded:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT
