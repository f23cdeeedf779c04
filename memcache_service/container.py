"""
Memcache Service - Service Container

Minimal registry mapping string keys to plain values or lazily built services.

A service factory runs on first access only; its result is memoized for the
lifetime of the container. Plain values (configuration entries) can be
overwritten at any time, a service can be overridden only until it is built.

Example:
    container = ServiceContainer({"memcache.prefix": "app"})
    container.factory("memcache", build_client)
    client = container["memcache"]  # build_client(container) runs here, once
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from .errors import FrozenServiceError, UnknownServiceError

logger = logging.getLogger(__name__)

ServiceFactory = Callable[["ServiceContainer"], Any]

_MISSING = object()


class ServiceContainer:
    """
    Thread-safe key/value registry with lazy, memoized services.

    Construction of a service is guarded by a per-key lock with a
    double-checked fast path, so concurrent first accesses build it once.
    A factory that raises leaves the slot empty; the next access retries.
    """

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(values or {})
        self._factories: dict[str, ServiceFactory] = {}
        self._built: set[str] = set()
        self._key_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def factory(self, key: str, factory: ServiceFactory) -> None:
        """Register a lazy service under ``key``."""
        with self._lock:
            if key in self._built:
                raise FrozenServiceError(key)
            self._values.pop(key, None)
            self._factories[key] = factory
        logger.debug("Registered service factory: %s", key)

    def _built_value(self, key: str) -> Any:
        """Memoized instance for ``key``, or _MISSING; consistent with reset()."""
        with self._lock:
            if key in self._built:
                return self._values.get(key, _MISSING)
            return _MISSING

    def __getitem__(self, key: str) -> Any:
        factory = self._factories.get(key)
        if factory is None:
            value = self._values.get(key, _MISSING)
            if value is _MISSING:
                raise UnknownServiceError(key)
            return value

        value = self._built_value(key)
        if value is not _MISSING:
            return value

        with self._lock_for(key):
            value = self._built_value(key)
            if value is not _MISSING:
                return value

            value = factory(self)
            with self._lock:
                self._values[key] = value
                self._built.add(key)
            logger.debug("Built service: %s", key)
            return value

    def __setitem__(self, key: str, value: Any) -> None:
        with self._lock:
            if key in self._built:
                raise FrozenServiceError(key)
            self._factories.pop(key, None)
            self._values[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._values or key in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.keys())

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for ``key`` (building it if needed), or ``default``."""
        if key not in self:
            return default
        return self[key]

    def keys(self) -> list[str]:
        with self._lock:
            return list(dict.fromkeys([*self._values, *self._factories]))

    def update(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            self[key] = value

    def is_built(self, key: str) -> bool:
        """True once the service under ``key`` has been constructed."""
        return key in self._built

    def reset(self, key: str) -> Any:
        """
        Drop the memoized service under ``key`` and keep its factory.

        Returns:
            The dropped instance, or None if nothing was built
        """
        with self._lock:
            if key not in self._built:
                return None
            self._built.discard(key)
            return self._values.pop(key, None)
