from config import Environment, Settings


class FakeClock:
    """Manually advanced time source for TTL and rate-limit tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_settings(**overrides) -> Settings:
    settings = Settings()
    settings.environment = Environment.DEVELOPMENT
    settings.database_url = "sqlite://"
    settings.database_echo = False
    settings.cache_cleanup_interval = 0
    settings.cors_allow_origin = "*"
    settings.enable_ip_whitelist = None
    settings.enable_rate_limit = None
    settings.log_requests = None
    for name, value in overrides.items():
        setattr(settings, name, value)
    return settings
