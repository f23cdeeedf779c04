"""
Memcache Service - Cache Client Interface

Defines the capability interface every cache client variant implements:
the pymemcache-backed network client, the in-memory mock and the logging
decorator. Custom clients supplied by name are duck-typed against it.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from ..config.servers import DEFAULT_PORT, DEFAULT_WEIGHT


class Option(str, Enum):
    """Client options settable through set_option()."""

    PREFIX_KEY = "prefix_key"
    CONNECT_TIMEOUT = "connect_timeout"
    TIMEOUT = "timeout"
    NO_DELAY = "no_delay"


class CacheClient(ABC):
    """
    Abstract base class for memcache clients.

    Keys passed to get/set/delete are stored as ``prefix + key`` where the
    prefix is the value of Option.PREFIX_KEY.
    """

    @abstractmethod
    def add_server(self, host: str, port: int = DEFAULT_PORT, weight: int = DEFAULT_WEIGHT) -> bool:
        """
        Add a server to the client's pool.

        Args:
            host: Server hostname or IP address
            port: Server port
            weight: Relative weight of the server in the pool

        Returns:
            True if the server was added
        """
        pass

    @abstractmethod
    def set_option(self, option: Option, value: Any) -> bool:
        """
        Set a client option.

        Returns:
            True if the option was accepted, False otherwise
        """
        pass

    @abstractmethod
    def get_option(self, option: Option) -> Any:
        """Return the current value of a client option."""
        pass

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """
        Retrieve a value from the cache.

        Returns:
            Cached value if found, None on a miss
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any, expire: int = 0) -> bool:
        """
        Store a value in the cache.

        Args:
            key: Cache key (without prefix)
            value: Value to store
            expire: Expiry in seconds, 0 = never expire

        Returns:
            True if stored successfully
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a key. Returns True if the key existed."""
        pass

    @abstractmethod
    def flush(self) -> bool:
        """Invalidate all items on all servers."""
        pass

    @abstractmethod
    def get_server_list(self) -> list[dict[str, Any]]:
        """Return the configured servers as dicts with host, port and weight."""
        pass

    def get_prefix(self) -> str:
        """Return the key prefix currently in use."""
        return self.get_option(Option.PREFIX_KEY) or ""

    def close(self) -> None:
        """Release connections held by the client."""
        return None
