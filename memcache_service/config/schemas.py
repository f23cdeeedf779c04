"""
Memcache Service - Configuration Schemas

Typed view over the namespaced configuration entries of one registered
cache instance (``<name>.client``, ``<name>.prefix``, ``<name>.servers``).

The raw entries live in the service container and stay writable until the
client is built; MemcacheConfig is produced from them exactly once, at
construction time.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .servers import ServerDescriptor, normalize_servers

CONFIG_KEYS = ("client", "prefix", "servers")


def config_key(name: str, option: str) -> str:
    """Return the namespaced container key, e.g. ``memcache.prefix``."""
    return f"{name}.{option}"


class MemcacheConfig(BaseModel):
    """Configuration of a single registered cache client."""

    model_config = ConfigDict(frozen=True)

    client: str | None = Field(
        default=None,
        description='Client to use: None for the network client, "mock", or a class path',
    )
    prefix: str = Field(default="", description="Key prefix applied via Option.PREFIX_KEY")
    servers: list[ServerDescriptor] = Field(
        default_factory=lambda: normalize_servers(None),
        description="Memcached nodes, in pool order",
    )

    @field_validator("client", mode="before")
    @classmethod
    def validate_client(cls, v: Any) -> str | None:
        """Treat empty values as the default network client."""
        if v is None or v == "":
            return None
        if not isinstance(v, str):
            raise ValueError("client must be a string naming the cache client")
        return v

    @field_validator("prefix", mode="before")
    @classmethod
    def validate_prefix(cls, v: Any) -> str:
        return "" if v is None else v

    @field_validator("servers", mode="before")
    @classmethod
    def validate_servers(cls, v: Any) -> list[ServerDescriptor]:
        """Normalize raw server entries, filling in default port and weight."""
        return normalize_servers(v)
