"""Statistics store factory.

Centralizes creation of concrete ``StatisticsStore`` backends so callers
don't depend on implementation details.
"""

from enum import Enum
from typing import Any, Dict, Mapping

import structlog

from irscore.common.config import ScoringConfig
from .base import StatisticsStore
from .memory import InMemoryStatisticsStore
from .redis_store import RedisStatisticsStore

logger = structlog.get_logger("collection_stats.factory")


class StatisticsBackend(Enum):
    """Supported statistics store types."""
    REDIS = "redis"
    MEMORY = "memory"


class StatisticsStoreFactory:
    """Factory for creating statistics store instances."""

    @staticmethod
    def create(backend: StatisticsBackend, config: Dict[str, Any]) -> StatisticsStore:
        """Create a statistics store.

        Parameters
        - backend: A ``StatisticsBackend`` value
        - config: Backend-specific parameters (``redis_url`` for Redis,
          ``values`` for the in-memory store)
        """
        if backend == StatisticsBackend.REDIS:
            redis_url = config.get("redis_url")
            if not redis_url:
                raise ValueError("Redis statistics store requires 'redis_url' in config")

            return RedisStatisticsStore(
                redis_url=redis_url,
                pool_size=config.get("pool_size", 16),
                socket_timeout=config.get("socket_timeout", 5.0),
            )

        elif backend == StatisticsBackend.MEMORY:
            return InMemoryStatisticsStore(config.get("values"))

        else:
            raise ValueError(f"Unsupported statistics backend: {backend}")

    @staticmethod
    def create_from_config(config: Dict[str, Any]) -> StatisticsStore:
        """Create a store from a dictionary with a ``type`` key."""
        backend_str = config.get("type", "redis")

        try:
            backend = StatisticsBackend(backend_str)
        except ValueError:
            raise ValueError(f"Unsupported statistics backend: {backend_str}")

        return StatisticsStoreFactory.create(backend, config)


def create_statistics_store(config: ScoringConfig) -> StatisticsStore:
    """Create the store selected by ``IRSCORE_STATS_BACKEND``."""
    logger.debug("Creating statistics store", backend=config.irscore_stats_backend)
    return StatisticsStoreFactory.create_from_config({
        "type": config.irscore_stats_backend,
        "redis_url": config.irscore_redis_url,
        "pool_size": config.irscore_redis_pool_size,
        "socket_timeout": config.irscore_redis_socket_timeout,
    })


def create_statistics_store_from_env(env_config: Mapping[str, str]) -> StatisticsStore:
    """Create a store from a flat mapping of environment variable names.

    Useful with ``irscore.common.config.load_env_file``.
    """
    backend = env_config.get("IRSCORE_STATS_BACKEND", "redis")

    if backend == "redis":
        return StatisticsStoreFactory.create_from_config({
            "type": "redis",
            "redis_url": env_config.get("IRSCORE_REDIS_URL", "redis://localhost:6379/0"),
            "pool_size": int(env_config.get("IRSCORE_REDIS_POOL_SIZE", "16")),
            "socket_timeout": float(env_config.get("IRSCORE_REDIS_SOCKET_TIMEOUT", "5.0")),
        })

    elif backend == "memory":
        return StatisticsStoreFactory.create_from_config({"type": "memory"})

    else:
        raise ValueError(f"Unsupported statistics backend: {backend}")
