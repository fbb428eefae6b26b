"""
Unit tests for the fixed-window rate limiter and admin token helpers.
"""
from datetime import timedelta

from jobintake.core.rate_limit import FixedWindowRateLimiter
from jobintake.core.security import create_access_token, decode_access_token


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_allows_up_to_limit_per_window():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(3, 3600, clock=clock)

    assert [limiter.hit("1.2.3.4") for _ in range(4)] == [True, True, True, False]
    assert limiter.hit("5.6.7.8") is True


def test_new_window_resets_count():
    clock = FakeClock(now=7200.0)
    limiter = FixedWindowRateLimiter(1, 3600, clock=clock)

    assert limiter.hit("ip") is True
    assert limiter.hit("ip") is False
    clock.now += 3600
    assert limiter.hit("ip") is True


def test_reset_clears_all_keys():
    limiter = FixedWindowRateLimiter(1, 60, clock=FakeClock())
    limiter.hit("ip")
    limiter.reset()
    assert limiter.hit("ip") is True


def test_token_round_trip():
    token = create_access_token({"sub": "admin-1", "role": "admin"})
    claims = decode_access_token(token)
    assert claims["sub"] == "admin-1"
    assert claims["role"] == "admin"


def test_expired_or_garbage_token_is_none():
    expired = create_access_token({"sub": "admin-1"}, expires_delta=timedelta(minutes=-5))
    assert decode_access_token(expired) is None
    assert decode_access_token("garbage") is None
