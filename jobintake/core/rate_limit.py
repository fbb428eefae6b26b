"""
Fixed-window in-memory rate limiter for public endpoints.
"""
import logging
import threading
import time
from typing import Dict, Tuple
from fastapi import Request, HTTPException, status

logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # First hop is the original client
        return forwarded.split(",")[0].strip()
    
    if request.client:
        return request.client.host
    
    return "unknown"


class FixedWindowRateLimiter:
    """
    Count requests per key inside fixed windows of ``window_seconds``.

    The counter for a key resets when a new window starts, so a client can
    make at most ``max_requests`` requests per window.
    """

    def __init__(self, max_requests: int, window_seconds: int, clock=time.time):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        # {key: (window_start, count)}
        self._windows: Dict[str, Tuple[float, int]] = {}

    def hit(self, key: str) -> bool:
        """Record a request for ``key``; return False when the cap is exceeded."""
        now = self._clock()
        window_start = now - (now % self.window_seconds)
        with self._lock:
            start, count = self._windows.get(key, (window_start, 0))
            if start != window_start:
                start, count = window_start, 0
            if count >= self.max_requests:
                self._windows[key] = (start, count)
                return False
            self._windows[key] = (start, count + 1)
            return True

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


def rate_limit_dependency(limiter: FixedWindowRateLimiter):
    """
    Build a FastAPI dependency enforcing ``limiter`` per client IP.
    
    Raises:
        HTTPException: 429 if rate limit exceeded
    """
    def checker(request: Request) -> None:
        ip = get_client_ip(request)
        if not limiter.hit(ip):
            logger.warning(f"Rate limit exceeded for IP: {ip} ({limiter.max_requests} requests in {limiter.window_seconds}s)")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Too many submissions from this IP. Maximum {limiter.max_requests} requests per {limiter.window_seconds} seconds."
            )
        logger.debug(f"Rate limit check passed for IP: {ip}")

    return checker
