"""Centralized configuration; all env vars in one place."""

import os
from enum import Enum


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, value: str | None) -> "Environment":
        """Unknown or missing values fall back to development."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.DEVELOPMENT


def _env_flag(name: str) -> bool | None:
    """Read an optional boolean override; None when the variable is unset."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: Environment = Environment.parse(os.getenv("ENVIRONMENT"))

        # Database
        self.database_url: str = os.getenv("DATABASE_URL", "sqlite:///./spice_store.db")
        self.database_echo: bool = _env_flag("DATABASE_ECHO") or False

        # Cache
        self.cache_default_ttl: float = float(os.getenv("CACHE_DEFAULT_TTL", "300"))
        self.cache_cleanup_interval: float = float(os.getenv("CACHE_CLEANUP_INTERVAL", "600"))

        # Gatekeeper
        self.cors_allow_origin: str = os.getenv("CORS_ALLOW_ORIGIN", "*")
        self.enable_ip_whitelist: bool | None = _env_flag("ENABLE_IP_WHITELIST")
        self.enable_rate_limit: bool | None = _env_flag("ENABLE_RATE_LIMIT")
        self.log_requests: bool | None = _env_flag("LOG_REQUESTS")

    @property
    def is_production(self) -> bool:
        return self.environment is Environment.PRODUCTION

    def validate(self) -> list[str]:
        """Return a list of configuration problems worth a startup warning."""
        problems = []
        if self.is_production and self.database_url.startswith("sqlite"):
            problems.append("DATABASE_URL points at SQLite in production")
        if self.cache_default_ttl <= 0:
            problems.append("CACHE_DEFAULT_TTL must be positive")
        if self.cache_cleanup_interval < 0:
            problems.append("CACHE_CLEANUP_INTERVAL must not be negative")
        if self.is_production and self.enable_rate_limit is False:
            problems.append("Rate limiting explicitly disabled in production")
        return problems


settings = Settings()
