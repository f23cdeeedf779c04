"""
Memcache Service - Lazily Configured Memcache Clients

Registers named memcache clients in a service container, resolves the
client implementation from configuration and builds it on first use.
"""

__version__ = "1.0.0"

from .cache import get_cache, register_cache
from .container import ServiceContainer
from .errors import ConfigurationError, ServiceError

__all__ = [
    "register_cache",
    "get_cache",
    "ServiceContainer",
    "ConfigurationError",
    "ServiceError",
]
