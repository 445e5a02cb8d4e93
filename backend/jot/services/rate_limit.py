from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import dataclass
from threading import Lock
import time

from fastapi import Request

from jot.core.config import Settings
from jot.core.exceptions import RateLimitError


@dataclass(frozen=True)
class RateLimitRule:
    scope: str
    limit: int
    window_seconds: int


def auth_rules(settings: Settings) -> dict[str, RateLimitRule]:
    window = settings.auth_rate_limit_window_seconds
    return {
        "send_otp": RateLimitRule("auth.send_otp", settings.auth_rate_limit_otp_request_max_requests, window),
        "verify_otp": RateLimitRule("auth.verify_otp", settings.auth_rate_limit_otp_verify_max_requests, window),
        "signup": RateLimitRule("auth.signup", settings.auth_rate_limit_signup_max_requests, window),
        "login": RateLimitRule("auth.login", settings.auth_rate_limit_login_max_requests, window),
    }


class SlidingWindowLimiter:
    """Counts hits per key over a moving window; process-local."""

    def __init__(self) -> None:
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._lock = Lock()

    def hit(self, key: str, rule: RateLimitRule) -> int:
        """Record a hit and return 0, or the seconds to wait when the key is over its limit."""
        now = time.monotonic()
        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= now - rule.window_seconds:
                hits.popleft()
            if len(hits) >= max(1, rule.limit):
                return max(1, int(hits[0] + rule.window_seconds - now))
            hits.append(now)
        return 0

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


_limiter = SlidingWindowLimiter()


def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def enforce_rate_limit(request: Request, rule: RateLimitRule, *, identity: str | None = None) -> None:
    key = "|".join((rule.scope, client_address(request), (identity or "").strip().lower()))
    retry_after = _limiter.hit(key, rule)
    if retry_after:
        raise RateLimitError(retry_after)


def clear_rate_limiter() -> None:
    _limiter.reset()
