"""
Memcache Service - Configuration Module

Provides typed configuration, server list normalization and env loading.
"""

from .loader import load_env_overrides, load_instance_config
from .schemas import CONFIG_KEYS, MemcacheConfig, config_key
from .servers import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_WEIGHT,
    ServerDescriptor,
    normalize_server,
    normalize_servers,
    parse_server_string,
    parse_servers_env,
)

__all__ = [
    # Loader functions
    "load_env_overrides",
    "load_instance_config",
    # Schemas
    "MemcacheConfig",
    "ServerDescriptor",
    "CONFIG_KEYS",
    "config_key",
    # Server list normalization
    "normalize_server",
    "normalize_servers",
    "parse_server_string",
    "parse_servers_env",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_WEIGHT",
]
