"""Process-local response cache with per-entry expiry.

Entries expire lazily on read; ``cleanup()`` sweeps the rest and is driven
by the app's background task. The clock is injectable so expiry can be
tested without sleeping. Nothing is shared between workers or restarts.
"""

import json
import time
from typing import Any, Callable

DEFAULT_TTL_SECONDS = 5 * 60


class CacheKeys:
    # Every product listing key shares this prefix so updates can drop them together
    PRODUCTS_PREFIX = "products:"
    PRODUCTS_FEATURED = "products:featured"

    @staticmethod
    def products_list(params: dict) -> str:
        return f"products:list:{json.dumps(params, sort_keys=True, default=str)}"

    @staticmethod
    def products_featured(limit: int, lang: str) -> str:
        return f"{CacheKeys.PRODUCTS_FEATURED}:{limit}:{lang}"

    @staticmethod
    def products_checkout_page(lang: str) -> str:
        return f"{CacheKeys.PRODUCTS_FEATURED}:checkout-page:{lang}"

    @staticmethod
    def products_by_category(category_id: int, params: dict) -> str:
        return f"products:category:{category_id}:{json.dumps(params, sort_keys=True, default=str)}"

    @staticmethod
    def product_by_id(product_id: int) -> str:
        return f"product:{product_id}"

    @staticmethod
    def image(file_id: int | str) -> str:
        return f"image:{file_id}"


class TTLCache:
    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        default_ttl: float = DEFAULT_TTL_SECONDS,
    ):
        self._clock = clock
        self._default_ttl = default_ttl
        self._store: dict[str, tuple[float, Any]] = {}

    def _expired(self, expires_at: float) -> bool:
        return self._clock() > expires_at

    def get(self, key: str) -> Any | None:
        if key in self._store:
            expires_at, value = self._store[key]
            if not self._expired(expires_at):
                return value
            del self._store[key]
        return None

    def has(self, key: str) -> bool:
        if key in self._store:
            expires_at, _ = self._store[key]
            if not self._expired(expires_at):
                return True
            del self._store[key]
        return False

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        ttl = ttl_seconds or self._default_ttl
        self._store[key] = (self._clock() + ttl, value)

    def delete(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    def delete_prefix(self, prefix: str) -> int:
        keys = [k for k in self._store if k.startswith(prefix)]
        for key in keys:
            del self._store[key]
        return len(keys)

    def clear(self) -> None:
        self._store.clear()

    def cleanup(self) -> int:
        """Sweep every expired entry. Returns how many were removed."""
        now = self._clock()
        expired = [k for k, (expires_at, _) in self._store.items() if now > expires_at]
        for key in expired:
            del self._store[key]
        return len(expired)

    def stats(self) -> dict:
        """Entry count and keys as stored; expired entries not yet swept are included."""
        return {"size": len(self._store), "keys": list(self._store.keys())}
