"""
Cache Usage Example

Demonstrates how to register and use named memcache clients.

This example shows:
- Registering a client with configuration overrides
- Reading overrides from MEMCACHE_* environment variables
- Logging every cache call through a stdlib logger
- Running two independent instances side by side
"""

import logging

from memcache_service.cache import get_cache, get_container, register_cache
from memcache_service.config import load_env_overrides

# Configure logging
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> None:
    container = get_container()
    container["logger"] = logging.getLogger("memcache.calls")

    # Mock client unless MEMCACHE_CLIENT says otherwise
    overrides = {"memcache.client": "mock", "memcache.prefix": "example:"}
    overrides.update(load_env_overrides("memcache"))
    register_cache(overrides=overrides)

    register_cache("sessions", {"sessions.client": "mock", "sessions.prefix": "sess:"})

    cache = get_cache()
    cache.set("greeting", {"msg": "hello"}, expire=60)
    logger.info("greeting = %s", cache.get("greeting"))
    logger.info("servers = %s", cache.get_server_list())

    sessions = get_cache("sessions")
    logger.info("sessions sees greeting: %s", sessions.get("greeting"))


if __name__ == "__main__":
    main()
