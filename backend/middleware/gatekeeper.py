"""Request gatekeeper for /api routes: IP allow-list, rate limiting, response headers."""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware

from security import RateLimit, SecurityConfig
from services.cache import TTLCache

logger = logging.getLogger(__name__)

API_PREFIX = "/api/"
FALLBACK_IP = "127.0.0.1"


def resolve_client_ip(headers: Headers) -> str:
    """Client IP from proxy headers, most specific first."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip
    vercel_ip = headers.get("x-vercel-forwarded-for")
    if vercel_ip:
        return vercel_ip
    return FALLBACK_IP


@dataclass
class RateLimitRecord:
    count: int
    reset_time: float


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    limit: RateLimit

    @property
    def retry_after(self) -> int:
        return math.ceil(self.limit.window_seconds)


class RateLimiter:
    """Fixed-window request counter per (ip, path).

    With ``enforce=False`` every request is allowed and ``remaining`` reports
    the full quota; no bookkeeping happens.
    """

    def __init__(self, store: TTLCache, enforce: bool = False, clock: Callable[[], float] = time.time):
        self.store = store
        self.enforce = enforce
        self._clock = clock

    @staticmethod
    def key_for(ip: str, path: str) -> str:
        return f"rate_limit_{ip}_{path}"

    def check(self, ip: str, path: str, limit: RateLimit) -> RateLimitDecision:
        if not self.enforce:
            return RateLimitDecision(allowed=True, remaining=limit.max_requests, limit=limit)

        now = self._clock()
        key = self.key_for(ip, path)
        record: RateLimitRecord | None = self.store.get(key)

        if record is None or now > record.reset_time:
            record = RateLimitRecord(count=1, reset_time=now + limit.window_seconds)
            self.store.set(key, record, limit.window_seconds)
            return RateLimitDecision(allowed=True, remaining=limit.max_requests - 1, limit=limit)

        if record.count >= limit.max_requests:
            return RateLimitDecision(allowed=False, remaining=0, limit=limit)

        record.count += 1
        return RateLimitDecision(allowed=True, remaining=limit.max_requests - record.count, limit=limit)


class GatekeeperMiddleware(BaseHTTPMiddleware):
    """Gate every /api request before it reaches a router."""

    def __init__(self, app, config: SecurityConfig, limiter: RateLimiter):
        super().__init__(app)
        self.config = config
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not path.startswith(API_PREFIX):
            return await call_next(request)

        client_ip = resolve_client_ip(request.headers)
        if self.config.log_requests:
            logger.info("%s %s from %s", request.method, path, client_ip)

        if not self.config.is_ip_allowed(client_ip):
            logger.warning("Blocked request from non-allow-listed IP %s to %s", client_ip, path)
            return JSONResponse(
                {
                    "success": False,
                    "error": "Access denied",
                    "message": "Your IP address is not authorized to access this API",
                    "ip": client_ip,
                },
                status_code=403,
            )

        decision = self.limiter.check(client_ip, path, self.config.rate_limit_for(path))
        if not decision.allowed:
            logger.warning("Rate limit exceeded for %s on %s", client_ip, path)
            return JSONResponse(
                {
                    "success": False,
                    "error": "Rate limit exceeded",
                    "message": "Too many requests. Please try again later.",
                    "retryAfter": decision.retry_after,
                },
                status_code=429,
                headers={
                    "Retry-After": str(decision.retry_after),
                    "X-RateLimit-Limit": str(decision.limit.max_requests),
                    "X-RateLimit-Remaining": str(decision.remaining),
                },
            )

        response = await call_next(request)
        response.headers.update(self.config.security_headers)
        response.headers["X-RateLimit-Limit"] = str(decision.limit.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        response.headers.update(self.config.cors_headers)
        return response
