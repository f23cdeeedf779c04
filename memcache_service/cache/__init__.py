"""
Memcache Service - Cache Module

Lazily built, named memcache clients.

Canonical exports:
- factory.py: registration and lookup of named clients
- resolver.py: maps the configured client name to an implementation
- interface.py: capability interface shared by all clients
- logging_client.py: call-logging decorator
- clients/: network (pymemcache) and in-memory mock clients

Usage:
    from memcache_service.cache import get_cache, register_cache

    register_cache(overrides={"memcache.client": "mock"})
    cache = get_cache()
    cache.set("key", "value")
    value = cache.get("key")
"""

from .factory import (
    DEFAULT_NAME,
    build_client,
    close_all_caches,
    get_cache,
    get_container,
    list_cache_instances,
    register_cache,
    reset_cache_factory,
)
from .interface import CacheClient, Option
from .logging_client import LoggerSink, LoggingClient, LogSink, as_log_sink
from .resolver import register_client, registered_clients, resolve_client, unregister_client

__all__ = [
    # Factory functions
    "register_cache",
    "get_cache",
    "build_client",
    "get_container",
    "close_all_caches",
    "list_cache_instances",
    "reset_cache_factory",
    "DEFAULT_NAME",
    # Resolver
    "resolve_client",
    "register_client",
    "unregister_client",
    "registered_clients",
    # Interface
    "CacheClient",
    "Option",
    # Call logging
    "LoggingClient",
    "LoggerSink",
    "LogSink",
    "as_log_sink",
]
