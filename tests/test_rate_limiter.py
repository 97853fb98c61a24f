import threading
from datetime import datetime

import pytest

from intern_portal.config import Settings
from intern_portal.errors import RateLimited
from intern_portal.rate_limit.limiter import FixedWindowRateLimiter, RateLimiters


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_allows_up_to_max_then_blocks():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter("test", 60, 3, clock=clock)

    for _ in range(3):
        limiter.consume("1.2.3.4")

    with pytest.raises(RateLimited) as exc:
        limiter.consume("1.2.3.4")
    assert exc.value.status_code == 429
    assert exc.value.reset_at == datetime.utcfromtimestamp(clock.now + 60)
    assert "resetTime" in exc.value.to_dict()


def test_window_resets_after_expiry():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter("test", 60, 1, clock=clock)
    limiter.consume("ip")

    clock.now += 59
    with pytest.raises(RateLimited):
        limiter.consume("ip")

    clock.now += 1
    limiter.consume("ip")
    assert limiter.remaining("ip") == 0


def test_keys_are_independent():
    limiter = FixedWindowRateLimiter("test", 60, 1, clock=FakeClock())
    limiter.consume("a")
    limiter.consume("b")

    with pytest.raises(RateLimited):
        limiter.consume("a")


def test_refund_keeps_successful_attempts_free():
    limiter = FixedWindowRateLimiter("auth", 900, 2, clock=FakeClock())

    for _ in range(10):
        limiter.consume("ip")
        limiter.refund("ip")

    assert limiter.remaining("ip") == 2


def test_expired_windows_are_swept_on_consume():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter("test", 10, 5, clock=clock)
    for n in range(200):
        limiter.consume(f"10.0.0.{n}")
    assert len(limiter._windows) == 200

    clock.now += 11
    limiter.consume("10.1.0.1")

    assert list(limiter._windows) == ["10.1.0.1"]


def test_sweep_keeps_live_windows():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter("test", 10, 5, clock=clock)
    limiter.consume("a")
    clock.now += 5
    limiter.consume("b")
    clock.now += 6
    limiter.consume("c")

    assert sorted(limiter._windows) == ["b", "c"]
    assert limiter.remaining("b") == 4


def test_headers_report_remaining_and_reset():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter("test", 60, 3, clock=clock)
    limiter.consume("ip")
    clock.now += 20.5

    assert limiter.headers("ip") == {
        "RateLimit-Limit": "3",
        "RateLimit-Remaining": "2",
        "RateLimit-Reset": "40",
    }
    assert limiter.headers("unseen")["RateLimit-Reset"] == "60"


def test_concurrent_consumers_never_exceed_limit():
    limiter = FixedWindowRateLimiter("test", 900, 50)
    allowed = []
    blocked = []

    def hit():
        for _ in range(20):
            try:
                limiter.consume("shared")
                allowed.append(1)
            except RateLimited:
                blocked.append(1)

    threads = [threading.Thread(target=hit) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(allowed) == 50
    assert len(blocked) == 8 * 20 - 50


def test_limiters_from_settings():
    limiters = RateLimiters.from_settings(Settings(_env_file=None))

    assert limiters.api.max_requests == 1000
    assert limiters.auth.window_seconds == 15 * 60
    assert limiters.auth.max_requests == 50
    assert limiters.upload.window_seconds == 60
    assert limiters.upload.code == "UPLOAD_RATE_LIMIT_EXCEEDED"
