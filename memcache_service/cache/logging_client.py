"""
Memcache Service - Call Logging Client

LoggingClient wraps any cache client and reports each call to a log sink
before forwarding it. A sink is any object with ``debug(message, context)``;
LoggerSink adapts a stdlib ``logging.Logger`` to that shape.

The record is emitted first, so a call that fails in the wrapped client is
still logged. Return values and exceptions pass through untouched.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

from ..config.servers import DEFAULT_PORT, DEFAULT_WEIGHT
from .interface import CacheClient, Option


@runtime_checkable
class LogSink(Protocol):
    """Receiver of cache call records."""

    def debug(self, message: str, context: dict[str, Any]) -> None: ...


class LoggerSink:
    """Forward cache call records to a stdlib logger at DEBUG level."""

    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger

    def debug(self, message: str, context: dict[str, Any]) -> None:
        self.logger.debug(
            "%s",
            message,
            extra={"cache_call": message, "cache_arguments": context},
        )


def as_log_sink(value: Any) -> LogSink | None:
    """
    Interpret a container ``logger`` entry.

    None or False disable call logging, a ``logging.Logger`` is wrapped in
    LoggerSink, anything else with a ``debug`` method is used as-is.
    """
    if value is None or value is False:
        return None
    if isinstance(value, logging.Logger):
        return LoggerSink(value)
    if isinstance(value, LogSink):
        return value
    raise TypeError(f"Log sink must provide a debug() method, got {type(value).__name__}")


class LoggingClient(CacheClient):
    """Cache client decorator that logs every call before forwarding it."""

    def __init__(self, inner: Any, sink: LogSink) -> None:
        self._inner = inner
        self._sink = sink

    @property
    def inner(self) -> Any:
        """The wrapped client."""
        return self._inner

    def get_logger(self) -> LogSink:
        return self._sink

    def _log(self, method: str, **arguments: Any) -> None:
        self._sink.debug(method, arguments)

    def add_server(self, host: str, port: int = DEFAULT_PORT, weight: int = DEFAULT_WEIGHT) -> bool:
        self._log("add_server", host=host, port=port, weight=weight)
        return self._inner.add_server(host, port, weight)

    def set_option(self, option: Option, value: Any) -> bool:
        self._log("set_option", option=option, value=value)
        return self._inner.set_option(option, value)

    def get_option(self, option: Option) -> Any:
        self._log("get_option", option=option)
        return self._inner.get_option(option)

    def get(self, key: str) -> Any | None:
        self._log("get", key=key)
        return self._inner.get(key)

    def set(self, key: str, value: Any, expire: int = 0) -> bool:
        self._log("set", key=key, value=value, expire=expire)
        return self._inner.set(key, value, expire)

    def delete(self, key: str) -> bool:
        self._log("delete", key=key)
        return self._inner.delete(key)

    def flush(self) -> bool:
        self._log("flush")
        return self._inner.flush()

    def get_server_list(self) -> list[dict[str, Any]]:
        self._log("get_server_list")
        return self._inner.get_server_list()

    def get_prefix(self) -> str:
        return self._inner.get_prefix()

    def close(self) -> None:
        self._inner.close()
