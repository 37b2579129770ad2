# modelchat/services/rate_limit.py
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import Request, Response

from ..utils.errors import RateLimited

logger = logging.getLogger(__name__)

GLOBAL_KEY = "global"


@dataclass(frozen=True)
class RateLimitInfo:
    """Rate limit state of one key, exposed as standard RateLimit-* headers."""

    limit: int
    remaining: int
    reset_seconds: int
    window_seconds: int
    allowed: bool = True

    def headers(self) -> dict[str, str]:
        headers = {
            "RateLimit-Policy": f"{self.limit};w={self.window_seconds}",
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(max(0, self.remaining)),
            "RateLimit-Reset": str(self.reset_seconds),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.reset_seconds)
        return headers

    def apply_headers(self, response: Response) -> None:
        response.headers.update(self.headers())


class FixedWindowRateLimiter:
    """In-memory fixed window counter.

    Nothing is persisted: counts vanish with their window or a restart.
    """

    def __init__(
            self,
            max_requests: int,
            window_seconds: float,
            clock: Callable[[], float] = time.monotonic
    ):
        if max_requests <= 0 or window_seconds <= 0:
            raise ValueError("max_requests and window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        # key -> (window start, hits in window)
        self._windows: dict[str, tuple[float, int]] = {}

    def hit(self, key: str) -> RateLimitInfo:
        """Count one submission for `key` and report whether it is admitted."""
        with self._lock:
            now = self._clock()
            self._discard_expired(now)

            started, count = self._windows.get(key, (now, 0))
            allowed = count < self.max_requests
            if allowed:
                count += 1
                self._windows[key] = (started, count)

        reset = max(0.0, started + self.window_seconds - now)
        return RateLimitInfo(
            limit=self.max_requests,
            remaining=self.max_requests - count,
            reset_seconds=math.ceil(reset),
            window_seconds=math.ceil(self.window_seconds),
            allowed=allowed
        )

    def _discard_expired(self, now: float) -> None:
        expired = [
            key for key, (started, _) in self._windows.items()
            if now - started >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]


def rate_limit_key(request: Request, partition: str) -> str:
    if partition == "client" and request.client:
        return f"client:{request.client.host}"
    return GLOBAL_KEY


async def enforce_message_rate_limit(request: Request, response: Response) -> RateLimitInfo:
    """Dependency guarding message submission. Runs before any storage access."""
    limiter: FixedWindowRateLimiter = request.app.state.rate_limiter
    key = rate_limit_key(request, request.app.state.settings.RATE_LIMIT_PARTITION)

    info = limiter.hit(key)
    if not info.allowed:
        logger.warning(f"Rate limit exceeded for {key}, resets in {info.reset_seconds}s")
        raise RateLimited(headers=info.headers())

    info.apply_headers(response)
    return info
