"""
Memcache Service - Cache Factory

Registers named memcache clients in a service container and builds them
lazily, on first access.

Key points:
- register_cache() only writes configuration and a factory; nothing is
  resolved or connected until the client is first read
- Configuration is namespaced per instance: ``<name>.client``,
  ``<name>.prefix``, ``<name>.servers``
- Entries can be changed after registration until the client is built;
  after that the client is frozen and further writes do not affect it
- A ``logger`` entry in the container (a log sink or ``logging.Logger``)
  wraps every client built afterwards in LoggingClient; None or False
  disables it

Examples:
    from memcache_service.cache import get_cache, register_cache

    register_cache(overrides={"memcache.prefix": "app:"})
    cache = get_cache()  # built here

    # Independent instances under other names
    register_cache("sessions", {"sessions.client": "mock"})
"""

from __future__ import annotations

import logging
import weakref
from collections.abc import Mapping
from typing import Any

from ..config import config_key, load_instance_config
from ..container import ServiceContainer
from ..errors import FrozenServiceError
from .interface import Option
from .logging_client import LoggingClient, as_log_sink
from .resolver import resolve_client

logger = logging.getLogger(__name__)

DEFAULT_NAME = "memcache"
LOGGER_KEY = "logger"

# Global default container
_container = ServiceContainer()

# Names registered through register_cache(), per container
_registered: weakref.WeakKeyDictionary[ServiceContainer, list[str]] = weakref.WeakKeyDictionary()


def get_container() -> ServiceContainer:
    """Return the process-wide default container."""
    return _container


def _registered_names(container: ServiceContainer) -> list[str]:
    return _registered.setdefault(container, [])


def default_config(name: str) -> dict[str, Any]:
    """Default configuration entries for instance ``name``."""
    return {
        config_key(name, "client"): None,
        config_key(name, "prefix"): "",
        config_key(name, "servers"): None,
    }


def build_client(container: ServiceContainer, name: str) -> Any:
    """
    Build and configure the client for ``name`` from the container's entries.

    Order of operations: resolve the client, wrap it for call logging when
    a sink is configured, add every server in list order, then set the key
    prefix if one is configured.

    Raises:
        ConfigurationError: If the configuration is invalid or the client
            cannot be resolved
    """
    config = load_instance_config(container, name)

    logger.info(
        "Creating cache client '%s' (%s)",
        name,
        config.client or "memcached",
        extra={
            "cache_name": name,
            "client": config.client,
            "servers": len(config.servers),
        },
    )

    client = resolve_client(config.client)

    sink = as_log_sink(container.get(LOGGER_KEY))
    if sink is not None:
        client = LoggingClient(client, sink)

    for server in config.servers:
        client.add_server(server.host, server.port, server.weight)

    if config.prefix:
        client.set_option(Option.PREFIX_KEY, config.prefix)

    logger.info(
        "Cache client '%s' created successfully",
        name,
        extra={"cache_name": name, "client_type": type(client).__name__},
    )
    return client


def register_cache(
    name: str = DEFAULT_NAME,
    overrides: Mapping[str, Any] | None = None,
    container: ServiceContainer | None = None,
) -> ServiceContainer:
    """
    Register a lazily built cache client under ``name``.

    Args:
        name: Container key of the client; also the configuration namespace
        overrides: Configuration entries applied over the defaults,
            e.g. ``{"memcache.prefix": "app:"}``
        container: Target container (the default container if not provided)

    Returns:
        The container the client was registered in

    Raises:
        FrozenServiceError: If the client under ``name`` has already been built
    """
    container = _container if container is None else container

    if container.is_built(name):
        # Leave the entries consistent with the client already in use
        raise FrozenServiceError(name)

    container.update(default_config(name))
    if overrides:
        container.update(overrides)

    container.factory(name, lambda c: build_client(c, name))

    names = _registered_names(container)
    if name not in names:
        names.append(name)

    logger.debug("Registered cache '%s'", name, extra={"cache_name": name})
    return container


def get_cache(name: str = DEFAULT_NAME, container: ServiceContainer | None = None) -> Any:
    """
    Get the cache client registered under ``name``, building it on first use.

    If nothing is registered under ``name`` yet, it is registered with the
    default configuration first.
    """
    container = _container if container is None else container

    if name not in container:
        logger.debug("Cache '%s' not registered, registering with defaults", name)
        register_cache(name, container=container)

    return container[name]


def list_cache_instances(container: ServiceContainer | None = None) -> list[str]:
    """
    List the registered cache names whose client has been built.

    Returns:
        List of cache instance names
    """
    container = _container if container is None else container
    return [name for name in _registered_names(container) if container.is_built(name)]


def close_all_caches(container: ServiceContainer | None = None) -> None:
    """
    Close every built client and drop it from the container.

    The registrations stay in place; the next access builds a new client
    from the configuration present at that time.
    """
    container = _container if container is None else container

    names = list_cache_instances(container)
    if not names:
        logger.debug("No cache instances to close")
        return

    logger.info("Closing %d cache instance(s)...", len(names))

    for name in names:
        client = container.reset(name)
        close = getattr(client, "close", None)
        if close is not None:
            close()
        logger.info("Closed cache instance: %s", name)


def reset_cache_factory() -> None:
    """
    Replace the default container with an empty one.

    Does NOT call close() on built clients - use close_all_caches() for that.

    Warning: Only use this in testing contexts.
    """
    global _container

    count = len(list_cache_instances(_container))
    _registered.pop(_container, None)
    _container = ServiceContainer()
    logger.debug("Reset cache factory, dropped %d built instance(s)", count)
