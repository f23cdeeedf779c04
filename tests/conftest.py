"""
Memcache Service - Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
"""

from collections.abc import Generator
from typing import Any

import pytest

from memcache_service.cache import close_all_caches, reset_cache_factory, unregister_client
from memcache_service.cache.resolver import registered_clients
from memcache_service.container import ServiceContainer


class RecordingSink:
    """Log sink that keeps every debug record in call order."""

    def __init__(self) -> None:
        self.records: list[tuple[str, dict[str, Any]]] = []

    def debug(self, message: str, context: dict[str, Any]) -> None:
        self.records.append((message, dict(context)))

    @property
    def methods(self) -> list[str]:
        return [method for method, _ in self.records]


@pytest.fixture
def sink() -> RecordingSink:
    """Fresh recording log sink."""
    return RecordingSink()


@pytest.fixture
def container() -> ServiceContainer:
    """Empty service container, independent of the global default."""
    return ServiceContainer()


@pytest.fixture(autouse=True)
def reset_factory() -> Generator[None, None, None]:
    """Reset the default container and custom client registry after each test."""
    builtin = set(registered_clients())
    yield
    close_all_caches()
    reset_cache_factory()
    for name in set(registered_clients()) - builtin:
        unregister_client(name)


@pytest.fixture
def raw_servers() -> list[tuple[Any, ...]]:
    """Server entries mixing explicit, string and missing ports."""
    return [
        ("127.0.0.2", 11212),
        ("127.0.0.3", "11213"),
        ("127.0.0.4",),
    ]
