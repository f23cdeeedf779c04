"""
Memcache Service - Cache Clients

Exports the built-in client implementations.

The network client is lazy-loaded by the resolver to avoid importing
pymemcache when only the mock is used.
"""

from .mock import MemcachedMock

__all__ = [
    "MemcachedMock",
]
