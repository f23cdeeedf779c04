"""
Memcache Service - Client Resolver

Maps the ``<name>.client`` configuration value to a fresh, unconfigured
client instance:

    None / "memcached"   network client (pymemcache)
    "mock"               in-memory MemcachedMock
    registered name      constructor added with register_client()
    "pkg.module.Class"   class imported by dotted path ("pkg.module:Class" also works)

Anything else raises ConfigurationError. The resolver is only called from
the lazy service factory, so resolution errors surface on first access.
"""

from __future__ import annotations

import importlib
import logging
import threading
from collections.abc import Callable
from typing import Any

from ..errors import ConfigurationError
from .clients.mock import MemcachedMock

logger = logging.getLogger(__name__)

ClientConstructor = Callable[[], Any]

DEFAULT_CLIENT = "memcached"
MOCK_CLIENT = "mock"


def _create_memcached_client() -> Any:
    """Internal helper to construct the network client with lazy import."""
    try:
        from .clients.memcached import MemcachedClient
    except ImportError as e:
        logger.error(
            "Memcached client selected but pymemcache is not installed",
            extra={"package": "pymemcache>=4.0.0", "error": str(e)},
        )
        raise ConfigurationError(
            "Memcached client selected but pymemcache is unavailable. "
            "Install with: pip install 'pymemcache>=4.0.0' or use the mock client.",
            details={"package": "pymemcache>=4.0.0", "error": str(e), "client": DEFAULT_CLIENT},
        ) from e

    return MemcachedClient()


_registry: dict[str, ClientConstructor] = {}
_registry_lock = threading.Lock()


def _builtin_clients() -> dict[str, ClientConstructor]:
    return {
        DEFAULT_CLIENT: _create_memcached_client,
        MOCK_CLIENT: MemcachedMock,
    }


def register_client(name: str, constructor: ClientConstructor) -> None:
    """
    Register a custom client constructor under ``name``.

    The constructor is called without arguments each time a cache instance
    configured with ``client=name`` is built.
    """
    if not name or name in _builtin_clients():
        raise ValueError(f"Cannot register cache client under reserved name {name!r}")

    with _registry_lock:
        _registry[name] = constructor
    logger.debug("Registered cache client constructor: %s", name)


def unregister_client(name: str) -> bool:
    """Remove a custom client constructor. Returns True if it was registered."""
    with _registry_lock:
        return _registry.pop(name, None) is not None


def registered_clients() -> list[str]:
    """List the names accepted as ``<name>.client``, built-ins first."""
    with _registry_lock:
        return [*_builtin_clients(), *_registry]


def _import_class(path: str) -> Any:
    """
    Import ``pkg.module.Class`` or ``pkg.module:Class``; None when not found.

    Errors raised while executing the module itself propagate.
    """
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")

    parts = [*module_name.split("."), *attr.split(".")]
    if not module_name or not attr or not all(part.isidentifier() for part in parts):
        return None

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError:
        return None

    for part in attr.split("."):
        target = getattr(target, part, None)
        if target is None:
            return None
    return target


def _not_found(client_spec: str) -> ConfigurationError:
    logger.error(
        'Cannot find class "%s" to use as cache client',
        client_spec,
        extra={"client": client_spec, "supported": registered_clients()},
    )
    return ConfigurationError(
        f'Cannot find class "{client_spec}" to use as cache client.',
        details={"client": client_spec, "supported": registered_clients()},
    )


def resolve_client(client_spec: str | None = None) -> Any:
    """
    Create an unconfigured client for ``client_spec``.

    Args:
        client_spec: None for the network client, "mock", a registered
            name, or a fully-qualified class path

    Returns:
        New client instance (no servers, no options applied)

    Raises:
        ConfigurationError: If the client cannot be found or instantiated
    """
    spec = client_spec or DEFAULT_CLIENT

    with _registry_lock:
        constructor = _builtin_clients().get(spec) or _registry.get(spec)

    if constructor is None:
        try:
            constructor = _import_class(spec)
        except Exception as e:
            raise _not_found(spec) from e
        if constructor is None or not callable(constructor):
            raise _not_found(spec)

    try:
        client = constructor()
    except ConfigurationError:
        raise
    except Exception as e:
        raise _not_found(spec) from e

    logger.debug(
        "Resolved cache client '%s' to %s",
        spec,
        type(client).__name__,
        extra={"client": spec, "client_type": type(client).__name__},
    )
    return client
