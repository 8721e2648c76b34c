"""Gatekeeper security configuration, resolved once per process."""

from dataclasses import dataclass, field

from config import Environment, Settings

LOOPBACK_ADDRESSES = frozenset({"127.0.0.1", "::1", "localhost"})

ALLOWED_IPS = (
    "127.0.0.1",
    "::1",
    "localhost",
    "192.168.1.100",
    "192.168.1.101",
    "134.122.64.40",
)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Content-Security-Policy": (
        "default-src 'self'; script-src 'self' 'unsafe-inline' 'unsafe-eval'; "
        "style-src 'self' 'unsafe-inline'; img-src 'self' data: https:; font-src 'self' data:;"
    ),
}


@dataclass(frozen=True)
class RateLimit:
    window_seconds: float
    max_requests: int


DEFAULT_RATE_LIMIT = RateLimit(window_seconds=15 * 60, max_requests=100)

# First prefix match wins, so order matters.
ENDPOINT_RATE_LIMITS = (
    ("/api/orders", RateLimit(window_seconds=5 * 60, max_requests=100)),
    ("/api/orders/items", RateLimit(window_seconds=5 * 60, max_requests=150)),
    ("/api/orders/stats", RateLimit(window_seconds=10 * 60, max_requests=50)),
    ("/api/events", RateLimit(window_seconds=10 * 60, max_requests=100)),
    ("/api/coupons", RateLimit(window_seconds=15 * 60, max_requests=50)),
    ("/api/send-order-email", RateLimit(window_seconds=60 * 60, max_requests=10)),
)


@dataclass(frozen=True)
class EnvironmentToggles:
    enable_ip_whitelist: bool = False
    enable_rate_limit: bool = False
    log_requests: bool = False


# Both environments currently run fully permissive.
ENVIRONMENT_TOGGLES = {
    Environment.DEVELOPMENT: EnvironmentToggles(),
    Environment.PRODUCTION: EnvironmentToggles(),
}


@dataclass(frozen=True)
class SecurityConfig:
    environment: Environment = Environment.DEVELOPMENT
    allowed_ips: frozenset[str] = frozenset(ALLOWED_IPS)
    default_rate_limit: RateLimit = DEFAULT_RATE_LIMIT
    endpoint_rate_limits: tuple[tuple[str, RateLimit], ...] = ENDPOINT_RATE_LIMITS
    security_headers: dict[str, str] = field(default_factory=lambda: dict(SECURITY_HEADERS))
    cors_headers: dict[str, str] = field(default_factory=lambda: cors_headers("*"))
    enable_ip_whitelist: bool = False
    enable_rate_limit: bool = False
    log_requests: bool = False

    def is_ip_allowed(self, ip: str) -> bool:
        if not self.enable_ip_whitelist:
            return True
        if ip in LOOPBACK_ADDRESSES:
            return True
        return ip in self.allowed_ips

    def rate_limit_for(self, path: str) -> RateLimit:
        for prefix, limit in self.endpoint_rate_limits:
            if path.startswith(prefix):
                return limit
        return self.default_rate_limit


def cors_headers(allow_origin: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Requested-With",
        "Access-Control-Max-Age": "86400",
    }


def _pick(override: bool | None, default: bool) -> bool:
    return default if override is None else override


def load_security_config(settings: Settings) -> SecurityConfig:
    """Build the gatekeeper config for the configured environment.

    Explicit ENABLE_* environment variables win over the per-environment toggles.
    """
    toggles = ENVIRONMENT_TOGGLES.get(settings.environment, ENVIRONMENT_TOGGLES[Environment.DEVELOPMENT])
    return SecurityConfig(
        environment=settings.environment,
        cors_headers=cors_headers(settings.cors_allow_origin),
        enable_ip_whitelist=_pick(settings.enable_ip_whitelist, toggles.enable_ip_whitelist),
        enable_rate_limit=_pick(settings.enable_rate_limit, toggles.enable_rate_limit),
        log_requests=_pick(settings.log_requests, toggles.log_requests),
    )


def cors_middleware_options(config: SecurityConfig) -> dict:
    """CORSMiddleware keyword arguments matching the gatekeeper's CORS header table."""
    headers = config.cors_headers

    def _split(name: str) -> list[str]:
        return [part.strip() for part in headers[name].split(",") if part.strip()]

    return {
        "allow_origins": _split("Access-Control-Allow-Origin"),
        "allow_methods": _split("Access-Control-Allow-Methods"),
        "allow_headers": _split("Access-Control-Allow-Headers"),
        "max_age": int(headers["Access-Control-Max-Age"]),
    }
