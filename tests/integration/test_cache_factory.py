"""
Memcache Service - Cache Factory Integration Tests

Tests for registering, building and looking up named cache clients:
lazy construction, configuration overrides, client selection, call
logging and lifecycle management.
"""

import logging
import threading
from typing import Any
from unittest.mock import patch

import pytest

from memcache_service.cache import (
    close_all_caches,
    get_cache,
    get_container,
    list_cache_instances,
    register_cache,
    register_client,
    reset_cache_factory,
)
from memcache_service.cache.clients.memcached import MemcachedClient
from memcache_service.cache.clients.mock import MemcachedMock
from memcache_service.cache.interface import Option
from memcache_service.cache.logging_client import LoggerSink, LoggingClient
from memcache_service.container import ServiceContainer
from memcache_service.errors import ConfigurationError, FrozenServiceError

SERVERS = [
    ("127.0.0.2", 11212),
    ("127.0.0.3", "11213"),
    ("127.0.0.4",),
]


class AddServerOnlyClient:
    """Custom client that only knows add_server."""

    def __init__(self) -> None:
        self.servers: list[tuple[str, int, int]] = []

    def add_server(self, host: str, port: int = 11211, weight: int = 0) -> None:
        self.servers.append((host, port, weight))


class FailingClient(MemcachedMock):
    def add_server(self, host: str, port: int = 11211, weight: int = 0) -> bool:
        raise OSError(f"cannot reach {host}:{port}")


def assert_three_servers(cache: Any, prefix: str) -> None:
    assert cache.get_option(Option.PREFIX_KEY) == prefix
    assert cache.get_prefix() == prefix

    servers = cache.get_server_list()
    assert [(s["host"], s["port"]) for s in servers] == [
        ("127.0.0.2", 11212),
        ("127.0.0.3", 11213),
        ("127.0.0.4", 11211),
    ]


class TestCacheFactory:
    """Test suite for cache factory functionality."""

    def test_default_client_without_logger(self, container: ServiceContainer) -> None:
        container["logger"] = False
        register_cache(container=container)

        cache = container["memcache"]

        assert isinstance(cache, MemcachedClient)
        assert cache.get_prefix() == ""
        assert cache.get_server_list() == [{"host": "127.0.0.1", "port": 11211, "weight": 0}]

    def test_no_logger_entry_means_no_decoration(self, container: ServiceContainer) -> None:
        register_cache(overrides={"memcache.client": "mock"}, container=container)

        assert type(container["memcache"]) is MemcachedMock

    def test_defaults_with_logger(self, container: ServiceContainer, sink: Any) -> None:
        """Construction logs add_server then set_option, nothing else."""
        container["logger"] = sink
        register_cache(overrides={"memcache.prefix": "UnitTest"}, container=container)

        cache = container["memcache"]

        assert isinstance(cache, LoggingClient)
        assert isinstance(cache.inner, MemcachedClient)
        assert cache.get_logger() is sink
        assert sink.records == [
            ("add_server", {"host": "127.0.0.1", "port": 11211, "weight": 0}),
            ("set_option", {"option": Option.PREFIX_KEY, "value": "UnitTest"}),
        ]

        assert cache.get_option(Option.PREFIX_KEY) == "UnitTest"
        assert cache.get_prefix() == "UnitTest"
        assert [(s["host"], s["port"]) for s in cache.get_server_list()] == [("127.0.0.1", 11211)]

    def test_empty_prefix_skips_set_option(self, container: ServiceContainer, sink: Any) -> None:
        container["logger"] = sink
        register_cache(overrides={"memcache.client": "mock"}, container=container)

        container["memcache"]

        assert sink.methods == ["add_server"]

    def test_stdlib_logger_as_sink(self, container: ServiceContainer, caplog: pytest.LogCaptureFixture) -> None:
        calls_logger = logging.getLogger("tests.memcache.calls")
        container["logger"] = calls_logger
        register_cache(overrides={"memcache.client": "mock"}, container=container)

        with caplog.at_level(logging.DEBUG, logger="tests.memcache.calls"):
            cache = container["memcache"]

        assert isinstance(cache.get_logger(), LoggerSink)
        assert [r.cache_call for r in caplog.records if r.name == "tests.memcache.calls"] == ["add_server"]

    def test_config_at_registration(self, container: ServiceContainer) -> None:
        register_cache(
            overrides={
                "memcache.client": "mock",
                "memcache.prefix": "UnitTest2",
                "memcache.servers": SERVERS,
            },
            container=container,
        )

        assert_three_servers(container["memcache"], "UnitTest2")

    def test_config_set_later(self, container: ServiceContainer) -> None:
        """Entries written after registration but before first access apply."""
        register_cache(overrides={"memcache.client": "mock"}, container=container)
        container["memcache.prefix"] = "UnitTest3"
        container["memcache.servers"] = SERVERS

        assert_three_servers(container["memcache"], "UnitTest3")

    def test_network_client_with_servers(self, container: ServiceContainer) -> None:
        register_cache(
            overrides={"memcache.prefix": "UnitTest2", "memcache.servers": SERVERS},
            container=container,
        )

        cache = container["memcache"]

        assert isinstance(cache, MemcachedClient)
        assert_three_servers(cache, "UnitTest2")

    def test_config_after_build_is_ignored(self, container: ServiceContainer) -> None:
        register_cache(overrides={"memcache.client": "mock", "memcache.prefix": "before"}, container=container)
        cache = container["memcache"]

        container["memcache.prefix"] = "after"
        container["memcache.servers"] = SERVERS

        assert container["memcache"] is cache
        assert cache.get_prefix() == "before"
        assert len(cache.get_server_list()) == 1

    def test_built_client_cannot_be_replaced(self, container: ServiceContainer) -> None:
        register_cache(overrides={"memcache.client": "mock"}, container=container)
        container["memcache"]

        with pytest.raises(FrozenServiceError):
            container["memcache"] = MemcachedMock()

    def test_reregister_built_name_is_rejected(self, container: ServiceContainer) -> None:
        """Re-registering a built name leaves its config entries untouched."""
        register_cache(overrides={"memcache.client": "mock", "memcache.prefix": "a"}, container=container)
        cache = container["memcache"]

        with pytest.raises(FrozenServiceError):
            register_cache(overrides={"memcache.client": "mock", "memcache.prefix": "b"}, container=container)

        assert container["memcache.prefix"] == "a"
        assert container["memcache.client"] == "mock"
        assert container["memcache"] is cache
        assert cache.get_prefix() == "a"

    def test_reregister_before_build(self, container: ServiceContainer) -> None:
        register_cache(overrides={"memcache.client": "mock", "memcache.prefix": "a"}, container=container)
        register_cache(overrides={"memcache.client": "mock", "memcache.prefix": "b"}, container=container)

        assert container["memcache"].get_prefix() == "b"

    def test_custom_client(self, container: ServiceContainer) -> None:
        register_client("add-server-only", AddServerOnlyClient)
        register_cache(overrides={"memcache.client": "add-server-only"}, container=container)

        cache = container["memcache"]

        assert isinstance(cache, AddServerOnlyClient)
        assert cache.servers == [("127.0.0.1", 11211, 0)]

    def test_custom_client_by_path(self, container: ServiceContainer) -> None:
        register_cache(
            overrides={"memcache.client": "memcache_service.cache.clients.mock.MemcachedMock"},
            container=container,
        )

        assert isinstance(container["memcache"], MemcachedMock)

    def test_mock_client(self, container: ServiceContainer) -> None:
        register_cache(overrides={"memcache.client": "mock"}, container=container)

        cache = container["memcache"]

        assert isinstance(cache, MemcachedMock)
        assert cache.set("foo", "bar") is True
        assert cache.get("foo") == "bar"
        assert not cache.get("unset")

    def test_mock_with_logger(self, container: ServiceContainer, sink: Any) -> None:
        container["logger"] = sink
        register_cache(overrides={"memcache.client": "mock"}, container=container)

        cache = container["memcache"]

        assert isinstance(cache, LoggingClient)
        assert isinstance(cache.inner, MemcachedMock)
        assert cache.get_logger() is sink

    def test_missing_custom_client_fails_on_first_access(self, container: ServiceContainer) -> None:
        register_cache(overrides={"memcache.client": "\\Foo\\Bar"}, container=container)

        with pytest.raises(ConfigurationError) as exc_info:
            container["memcache"].get_server_list()

        assert str(exc_info.value) == 'Cannot find class "\\Foo\\Bar" to use as cache client.'
        assert not container.is_built("memcache")

    def test_failed_resolution_can_be_retried(self, container: ServiceContainer) -> None:
        register_cache(overrides={"memcache.client": "later"}, container=container)

        with pytest.raises(ConfigurationError):
            container["memcache"]

        register_client("later", MemcachedMock)
        assert isinstance(container["memcache"], MemcachedMock)

    def test_client_errors_propagate_unchanged(self, container: ServiceContainer) -> None:
        register_client("failing", FailingClient)
        register_cache(overrides={"memcache.client": "failing"}, container=container)

        with pytest.raises(OSError, match="cannot reach 127.0.0.1:11211"):
            container["memcache"]

        assert not container.is_built("memcache")

    def test_invalid_servers_fail_on_first_access(self, container: ServiceContainer) -> None:
        register_cache(
            overrides={"memcache.client": "mock", "memcache.servers": [("127.0.0.1", "port")]},
            container=container,
        )

        with pytest.raises(ConfigurationError):
            container["memcache"]

    def test_service_names(self, container: ServiceContainer) -> None:
        """Instances under different names are independent."""
        register_cache("memcached", {"memcached.client": "mock", "memcached.prefix": "prefix1"}, container)
        register_cache("cache", {"cache.client": "mock", "cache.prefix": "prefix2"}, container)

        assert "memcache" not in container
        assert "memcached" in container
        assert "cache" in container

        first = container["memcached"]
        second = container["cache"]
        assert isinstance(first, MemcachedMock)
        assert isinstance(second, MemcachedMock)

        first.set("foo", "bar")

        assert first.get("foo") == "bar"
        assert second.get("foo") is None
        assert first.get_prefix() == "prefix1"
        assert second.get_prefix() == "prefix2"

    def test_concurrent_first_access(self, container: ServiceContainer, sink: Any) -> None:
        """Racing first accesses build one client and add servers once."""
        container["logger"] = sink
        register_cache(overrides={"memcache.client": "mock", "memcache.prefix": "p"}, container=container)
        results: list[Any] = []
        barrier = threading.Barrier(8)

        def access() -> None:
            barrier.wait()
            results.append(container["memcache"])

        threads = [threading.Thread(target=access) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert all(result is results[0] for result in results)
        assert sink.methods == ["add_server", "set_option"]


class TestDefaultContainer:
    """Test suite for the module-level factory functions."""

    def test_get_cache_registers_defaults(self) -> None:
        with patch("memcache_service.cache.clients.memcached.HashClient"):
            cache = get_cache()

        assert isinstance(cache, MemcachedClient)
        assert "memcache" in get_container()
        assert get_cache() is cache

    def test_register_then_get(self) -> None:
        register_cache(overrides={"memcache.client": "mock", "memcache.prefix": "app:"})

        cache = get_cache()

        assert isinstance(cache, MemcachedMock)
        assert cache.get_prefix() == "app:"

    def test_list_cache_instances(self) -> None:
        register_cache("cache1", {"cache1.client": "mock"})
        register_cache("cache2", {"cache2.client": "mock"})
        assert list_cache_instances() == []

        get_cache("cache1")

        assert list_cache_instances() == ["cache1"]

    def test_close_all_caches(self) -> None:
        register_cache("cache1", {"cache1.client": "mock"})
        first = get_cache("cache1")
        first.set("key", "value")

        close_all_caches()

        assert list_cache_instances() == []
        second = get_cache("cache1")
        assert second is not first
        assert second.get("key") is None

    def test_close_all_caches_rebuilds_from_current_config(self) -> None:
        register_cache("cache1", {"cache1.client": "mock", "cache1.prefix": "old"})
        get_cache("cache1")
        close_all_caches()

        get_container()["cache1.prefix"] = "new"

        assert get_cache("cache1").get_prefix() == "new"

    def test_reset_cache_factory(self) -> None:
        register_cache(overrides={"memcache.client": "mock"})
        before = get_container()
        get_cache()

        reset_cache_factory()

        assert get_container() is not before
        assert "memcache" not in get_container()
        assert list_cache_instances() == []
