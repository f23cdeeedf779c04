"""
Memcache Service - Configuration Loader

Two sources feed a registered cache instance:
- environment variables (optionally from a .env file), turned into
  ``<name>.*`` overrides for register_cache();
- the namespaced entries in the service container, validated into a
  MemcacheConfig when the client is first built.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import CONFIG_KEYS, MemcacheConfig, config_key
from .servers import parse_servers_env

logger = logging.getLogger(__name__)


def _env_name(name: str, option: str) -> str:
    return f"{name}_{option}".upper().replace(".", "_").replace("-", "_")


def load_env_overrides(
    name: str = "memcache",
    env_file: str | None = None,
) -> dict[str, Any]:
    """
    Read configuration overrides for ``name`` from the environment.

    Recognized variables (for name "memcache"):
        MEMCACHE_CLIENT   "mock" or a class path
        MEMCACHE_PREFIX   key prefix
        MEMCACHE_SERVERS  "host[:port[:weight]],..."

    Args:
        name: Registered instance name
        env_file: Path to .env file (default: .env in the working directory)

    Returns:
        Overrides keyed ``<name>.<option>``, only for variables that are set

    Raises:
        ConfigurationError: If the .env file cannot be loaded
    """
    env_path = Path(env_file) if env_file else Path.cwd() / ".env"

    if env_path.exists():
        logger.info("Loading environment from %s", env_path)
        try:
            load_dotenv(env_path, override=False)
        except Exception as e:
            logger.error(
                "Failed to load .env file from %s: %s",
                env_path,
                e,
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    overrides: dict[str, Any] = {}

    client = os.getenv(_env_name(name, "client"))
    if client:
        overrides[config_key(name, "client")] = client

    prefix = os.getenv(_env_name(name, "prefix"))
    if prefix is not None:
        overrides[config_key(name, "prefix")] = prefix

    servers = os.getenv(_env_name(name, "servers"))
    if servers:
        overrides[config_key(name, "servers")] = parse_servers_env(servers)

    logger.debug(
        "Loaded %d override(s) for '%s' from environment",
        len(overrides),
        name,
        extra={"cache_name": name, "keys": sorted(overrides)},
    )
    return overrides


def load_instance_config(values: Mapping[str, Any], name: str) -> MemcacheConfig:
    """
    Validate the ``<name>.*`` entries currently present in ``values``.

    Raises:
        ConfigurationError: If the entries do not form a valid configuration
    """
    raw = {option: values.get(config_key(name, option)) for option in CONFIG_KEYS}

    try:
        return MemcacheConfig(**raw)
    except ValidationError as e:
        logger.error(
            "Configuration validation failed for '%s': %s",
            name,
            e,
            extra={"cache_name": name, "validation_errors": e.errors()},
        )
        raise ConfigurationError(
            f"Invalid configuration for cache '{name}'.",
            details={"cache_name": name, "validation_errors": e.errors()},
        ) from e
