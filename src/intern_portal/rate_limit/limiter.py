"""Fixed-window request counters keyed by client IP.

A window starts at the first hit from a key and lasts ``window_seconds``;
the reset time reported to clients is the end of that window. All counter
updates happen under one lock so concurrent requests never lose increments.
"""
import logging
import math
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict

from intern_portal.errors import RateLimited

logger = logging.getLogger(__name__)


@dataclass
class WindowState:
    started_at: float
    count: int = 0

    def reset_at(self, window_seconds: int) -> float:
        return self.started_at + window_seconds


class FixedWindowRateLimiter:

    def __init__(
        self,
        name: str,
        window_seconds: int,
        max_requests: int,
        code: str = "RATE_LIMIT_EXCEEDED",
        message: str = "Too many requests from this IP",
        clock: Callable[[], float] = time.time,
    ):
        self.name = name
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.code = code
        self.message = message
        self._clock = clock
        self._windows: Dict[str, WindowState] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def _current(self, key: str, now: float) -> WindowState:
        state = self._windows.get(key)
        if state is None or now >= state.reset_at(self.window_seconds):
            state = WindowState(started_at=now)
            self._windows[key] = state
        return state

    def _drop_expired(self, now: float) -> None:
        expired = [k for k, s in self._windows.items() if now >= s.reset_at(self.window_seconds)]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now

    def consume(self, key: str) -> WindowState:
        """Count one request for ``key``; raise ``RateLimited`` past the cap.

        Expired windows are swept at most once per ``window_seconds``.
        """
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._drop_expired(now)
            state = self._current(key, now)
            if state.count >= self.max_requests:
                reset_at = state.reset_at(self.window_seconds)
                logger.warning("%s limit hit for %s (%d/%d)", self.name, key, state.count, self.max_requests)
                raise RateLimited(
                    reset_at=datetime.utcfromtimestamp(reset_at),
                    message=self.message,
                    code=self.code,
                )
            state.count += 1
            return WindowState(started_at=state.started_at, count=state.count)

    def refund(self, key: str) -> None:
        """Give back one request, e.g. when a login attempt succeeded."""
        now = self._clock()
        with self._lock:
            state = self._windows.get(key)
            if state is not None and now < state.reset_at(self.window_seconds) and state.count > 0:
                state.count -= 1

    def remaining(self, key: str) -> int:
        now = self._clock()
        with self._lock:
            state = self._windows.get(key)
            if state is None or now >= state.reset_at(self.window_seconds):
                return self.max_requests
            return max(self.max_requests - state.count, 0)

    def reset_in(self, key: str) -> int:
        """Seconds until the current window of ``key`` ends."""
        now = self._clock()
        with self._lock:
            state = self._windows.get(key)
            if state is None or now >= state.reset_at(self.window_seconds):
                return self.window_seconds
            return max(0, math.ceil(state.reset_at(self.window_seconds) - now))

    def headers(self, key: str) -> Dict[str, str]:
        """``RateLimit-*`` response headers for ``key``."""
        return {
            "RateLimit-Limit": str(self.max_requests),
            "RateLimit-Remaining": str(self.remaining(key)),
            "RateLimit-Reset": str(self.reset_in(key)),
        }


@dataclass
class RateLimiters:
    api: FixedWindowRateLimiter
    auth: FixedWindowRateLimiter
    upload: FixedWindowRateLimiter

    @classmethod
    def from_settings(cls, settings) -> "RateLimiters":
        return cls(
            api=FixedWindowRateLimiter(
                "api",
                settings.API_RATE_WINDOW_SECONDS,
                settings.API_RATE_MAX_REQUESTS,
            ),
            auth=FixedWindowRateLimiter(
                "auth",
                settings.AUTH_RATE_WINDOW_SECONDS,
                settings.AUTH_RATE_MAX_ATTEMPTS,
                code="AUTH_RATE_LIMIT_EXCEEDED",
                message="Too many login attempts",
            ),
            upload=FixedWindowRateLimiter(
                "upload",
                settings.UPLOAD_RATE_WINDOW_SECONDS,
                settings.UPLOAD_RATE_MAX_UPLOADS,
                code="UPLOAD_RATE_LIMIT_EXCEEDED",
                message="Too many file uploads",
            ),
        )
