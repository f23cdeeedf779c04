"""
Memcache Service - Mock Memcache Client

In-memory client with the same surface as the network client.
No network I/O: servers and options are only recorded, values are kept
in a process-local dict. Suitable for tests and single-process development.
"""

import logging
import threading
import time
from typing import Any

from ...config.servers import DEFAULT_PORT, DEFAULT_WEIGHT, ServerDescriptor
from ..interface import CacheClient, Option

logger = logging.getLogger(__name__)

MAX_KEY_LENGTH = 250

# Expiry values above 30 days are absolute unix timestamps, as in memcached
RELATIVE_EXPIRY_LIMIT = 60 * 60 * 24 * 30


class MemcachedMock(CacheClient):
    """
    In-memory memcache client.

    Features:
    - Prefix-aware keys (Option.PREFIX_KEY)
    - Per-key expiry with memcached semantics
    - Memcached key validation (length, whitespace, control characters)
    - Thread-safe operations
    """

    def __init__(self) -> None:
        # Cache storage: prefixed key -> (value, expiry_time)
        self._cache: dict[str, tuple[Any, float | None]] = {}
        self._servers: list[ServerDescriptor] = []
        self._options: dict[Option, Any] = {
            Option.PREFIX_KEY: "",
            Option.CONNECT_TIMEOUT: 1.0,
            Option.TIMEOUT: 1.0,
            Option.NO_DELAY: False,
        }

        # Stats
        self._hits = 0
        self._misses = 0

        self._lock = threading.Lock()

    def _make_key(self, key: str) -> str | None:
        """Create prefixed key, or None when the result is not a valid memcached key."""
        if not isinstance(key, str) or not key:
            return None

        full_key = f"{self._options[Option.PREFIX_KEY]}{key}"
        if len(full_key.encode("utf-8")) > MAX_KEY_LENGTH:
            return None
        if any(ch.isspace() or ord(ch) < 32 or ord(ch) == 127 for ch in full_key):
            return None
        return full_key

    @staticmethod
    def _expiry_time(expire: int) -> float | None:
        if expire == 0:
            return None
        if expire < 0:
            # Negative expiry stores an item that is already expired
            return 0.0
        if expire > RELATIVE_EXPIRY_LIMIT:
            return float(expire)
        return time.time() + expire

    @staticmethod
    def _is_expired(expiry: float | None) -> bool:
        if expiry is None:
            return False
        return time.time() >= expiry

    def add_server(self, host: str, port: int = DEFAULT_PORT, weight: int = DEFAULT_WEIGHT) -> bool:
        with self._lock:
            self._servers.append(ServerDescriptor(host=host, port=port, weight=weight))
        return True

    def set_option(self, option: Option, value: Any) -> bool:
        try:
            option = Option(option)
        except ValueError:
            logger.warning("Ignoring unknown option: %s", option, extra={"option": str(option)})
            return False

        if option == Option.PREFIX_KEY:
            value = "" if value is None else str(value)
            if len(value) > MAX_KEY_LENGTH - 1:
                return False

        with self._lock:
            self._options[option] = value
        return True

    def get_option(self, option: Option) -> Any:
        try:
            return self._options.get(Option(option))
        except ValueError:
            return None

    def get(self, key: str) -> Any | None:
        cache_key = self._make_key(key)
        if cache_key is None:
            logger.warning("Attempted to get cache value with invalid key: %r", key)
            return None

        with self._lock:
            if cache_key not in self._cache:
                self._misses += 1
                return None

            value, expiry = self._cache[cache_key]
            if self._is_expired(expiry):
                del self._cache[cache_key]
                self._misses += 1
                return None

            self._hits += 1
            return value

    def set(self, key: str, value: Any, expire: int = 0) -> bool:
        cache_key = self._make_key(key)
        if cache_key is None:
            logger.warning("Attempted to set cache value with invalid key: %r", key)
            return False

        with self._lock:
            self._cache[cache_key] = (value, self._expiry_time(int(expire)))
        return True

    def delete(self, key: str) -> bool:
        cache_key = self._make_key(key)
        if cache_key is None:
            return False

        with self._lock:
            entry = self._cache.pop(cache_key, None)
        return entry is not None and not self._is_expired(entry[1])

    def flush(self) -> bool:
        with self._lock:
            size = len(self._cache)
            self._cache.clear()
        logger.debug("Flushed %d entries from mock cache", size)
        return True

    def get_server_list(self) -> list[dict[str, Any]]:
        with self._lock:
            return [server.model_dump() for server in self._servers]

    def get_stats(self) -> dict[str, Any]:
        """Hit/miss counters for the in-memory store."""
        with self._lock:
            return {
                "backend": "mock",
                "size": len(self._cache),
                "hits": self._hits,
                "misses": self._misses,
            }
