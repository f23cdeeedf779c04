"""
Memcache Service - Server List Normalization

Turns raw server configuration into an ordered list of ServerDescriptor.

Accepted entry shapes:
- ("127.0.0.2", 11212, 1)  host, port, weight
- ("127.0.0.3", "11213")   port coerced to int, weight defaults to 0
- ("127.0.0.4",)           port defaults to 11211
- "127.0.0.5"              bare host
- {"host": "127.0.0.6", "port": 11214}

An empty or missing list yields the single default server 127.0.0.1:11211.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ConfigurationError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 11211
DEFAULT_WEIGHT = 0


class ServerDescriptor(BaseModel):
    """A single memcached node."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(min_length=1, description="Server hostname or IP address")
    port: int = Field(default=DEFAULT_PORT, description="Server port")
    weight: int = Field(default=DEFAULT_WEIGHT, description="Relative weight in the pool")


def _entry_fields(entry: Any) -> dict[str, Any]:
    if isinstance(entry, ServerDescriptor):
        return entry.model_dump()
    if isinstance(entry, str):
        return {"host": entry}
    if isinstance(entry, Mapping):
        return {k: entry[k] for k in ("host", "port", "weight") if k in entry}
    if isinstance(entry, Sequence):
        if not 1 <= len(entry) <= 3:
            raise ConfigurationError(
                f"Server entry must have 1 to 3 elements (host[, port[, weight]]), got {len(entry)}.",
                details={"entry": list(entry)},
            )
        return dict(zip(("host", "port", "weight"), entry))

    raise ConfigurationError(
        f"Unsupported server entry type: {type(entry).__name__}",
        details={"entry": repr(entry)},
    )


def normalize_server(entry: Any) -> ServerDescriptor:
    """Normalize one raw server entry, filling in the default port and weight."""
    fields = _entry_fields(entry)
    try:
        return ServerDescriptor(**fields)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid server entry: {entry!r}",
            details={"entry": repr(entry), "validation_errors": e.errors()},
        ) from e


def normalize_servers(raw: Iterable[Any] | None) -> list[ServerDescriptor]:
    """
    Normalize raw server configuration.

    Args:
        raw: Sequence of server entries, or None

    Returns:
        ServerDescriptor list in input order; the default server when empty

    Raises:
        ConfigurationError: If an entry cannot be normalized
    """
    if isinstance(raw, (str, Mapping)):
        # A single entry given without the enclosing list
        raw = [raw]

    servers = [normalize_server(entry) for entry in raw or ()]
    if not servers:
        servers = [ServerDescriptor(host=DEFAULT_HOST)]
    return servers


def parse_server_string(value: str) -> tuple[str, ...]:
    """
    Split ``host[:port[:weight]]`` into a raw server entry.

    IPv6 hosts must be bracketed, e.g. ``[::1]:11211:2``; the brackets are
    stripped from the returned host.
    """
    text = value.strip()
    if text.startswith("["):
        host, sep, rest = text[1:].partition("]")
        if not sep or (rest and not rest.startswith(":")):
            raise ConfigurationError(
                f"Malformed IPv6 server entry: {value!r}",
                details={"entry": value},
            )
        parts = (host.strip(),)
        if rest:
            parts += tuple(part.strip() for part in rest[1:].split(":"))
    else:
        parts = tuple(part.strip() for part in text.split(":"))
    if not parts[0]:
        raise ConfigurationError(
            f"Server entry has no host: {value!r}",
            details={"entry": value},
        )
    return parts


def parse_servers_env(value: str) -> list[tuple[str, ...]]:
    """Parse a comma separated server list, e.g. ``"10.0.0.1:11211,10.0.0.2:11211:2"``."""
    return [parse_server_string(item) for item in value.split(",") if item.strip()]
