"""
Memcache Service - Memcached Network Client

Network memcache client built on pymemcache's HashClient:
- Servers are collected with add_server() and the pool is built lazily,
  on the first cache command, so construction never touches the network
- Option.PREFIX_KEY maps to pymemcache's key_prefix
- Values are serialized with pymemcache's pickle serde

Errors raised by pymemcache (connection failures, protocol errors) are not
caught here; they reach the caller as-is.

Example:
    client = MemcachedClient()
    client.add_server("127.0.0.1", 11211)
    client.set_option(Option.PREFIX_KEY, "app:")
    client.set("greeting", {"msg": "hello"}, expire=60)
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from pymemcache import serde
from pymemcache.client.hash import HashClient

from ...config.servers import DEFAULT_PORT, DEFAULT_WEIGHT, ServerDescriptor
from ..interface import CacheClient, Option

logger = logging.getLogger(__name__)


class MemcachedClient(CacheClient):
    """
    Memcached client over a pymemcache HashClient.

    Notes:
    - Keys are distributed with pymemcache's rendezvous hashing; server
      weight is recorded and reported but not used for distribution.
    - Changing servers or options drops the current pool; the next command
      reconnects with the new settings.
    """

    def __init__(
        self,
        connect_timeout: float | None = None,
        timeout: float | None = None,
        no_delay: bool = False,
    ) -> None:
        self._servers: list[ServerDescriptor] = []
        self._options: dict[Option, Any] = {
            Option.PREFIX_KEY: "",
            Option.CONNECT_TIMEOUT: connect_timeout,
            Option.TIMEOUT: timeout,
            Option.NO_DELAY: no_delay,
        }
        self._client: HashClient | None = None
        self._lock = threading.Lock()

    # ------------ Helpers ------------

    def _drop_pool(self) -> None:
        """Close and forget the current pool. Caller holds the lock."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _pool(self) -> HashClient:
        """Return the connection pool, creating it on first use."""
        with self._lock:
            if self._client is None:
                logger.debug(
                    "Creating memcached pool with %d server(s)",
                    len(self._servers),
                    extra={"servers": [f"{s.host}:{s.port}" for s in self._servers]},
                )
                self._client = HashClient(
                    [(server.host, server.port) for server in self._servers],
                    serde=serde.pickle_serde,
                    connect_timeout=self._options[Option.CONNECT_TIMEOUT],
                    timeout=self._options[Option.TIMEOUT],
                    no_delay=bool(self._options[Option.NO_DELAY]),
                    key_prefix=self._options[Option.PREFIX_KEY].encode("utf-8"),
                    default_noreply=False,
                )
            return self._client

    # ------------ Configuration ------------

    def add_server(self, host: str, port: int = DEFAULT_PORT, weight: int = DEFAULT_WEIGHT) -> bool:
        server = ServerDescriptor(host=host, port=port, weight=weight)
        with self._lock:
            self._servers.append(server)
            self._drop_pool()
        return True

    def set_option(self, option: Option, value: Any) -> bool:
        try:
            option = Option(option)
        except ValueError:
            logger.warning("Ignoring unknown option: %s", option, extra={"option": str(option)})
            return False

        if option == Option.PREFIX_KEY:
            value = "" if value is None else str(value)

        with self._lock:
            self._options[option] = value
            self._drop_pool()
        return True

    def get_option(self, option: Option) -> Any:
        try:
            return self._options.get(Option(option))
        except ValueError:
            return None

    def get_server_list(self) -> list[dict[str, Any]]:
        with self._lock:
            return [server.model_dump() for server in self._servers]

    # ------------ Cache commands ------------

    def get(self, key: str) -> Any | None:
        return self._pool().get(key)

    def set(self, key: str, value: Any, expire: int = 0) -> bool:
        return bool(self._pool().set(key, value, expire=expire))

    def delete(self, key: str) -> bool:
        return bool(self._pool().delete(key))

    def flush(self) -> bool:
        # HashClient.flush_all() returns None; failures raise
        self._pool().flush_all()
        return True

    def close(self) -> None:
        with self._lock:
            self._drop_pool()
        logger.debug("Memcached client closed")
