"""Redis implementation of the statistics store.

Values are read with plain ``GET`` commands. The client is built on a
``redis.ConnectionPool``: each command checks a connection out of the pool
and returns it afterwards, so one store instance can serve all scoring
threads of a query.

Connection management
- The pool is created on construction and released by ``close``
- Redis errors are wrapped in ``StatisticsStoreError`` and never retried
"""

from typing import Dict, Iterable, Optional, Tuple

import redis
import structlog

from .base import StatisticsStore, StatisticsStoreError

logger = structlog.get_logger("collection_stats.redis")


class RedisStatisticsStore(StatisticsStore):
    """Redis-backed statistics store."""

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        pool_size: int = 16,
        socket_timeout: float = 5.0,
        client: Optional[redis.Redis] = None,
    ):
        """Configure a Redis-backed statistics store.

        Parameters
        - redis_url: ``redis://`` URL of the statistics database
        - pool_size: Max connections kept in the pool
        - socket_timeout: Seconds to allow per command
        - client: Pre-built client, used instead of creating a pool
        """
        self.redis_url = redis_url
        self.pool_size = pool_size
        self.socket_timeout = socket_timeout

        self._pool: Optional[redis.ConnectionPool] = None
        if client is not None:
            self._client = client
        else:
            self._pool = redis.ConnectionPool.from_url(
                redis_url,
                max_connections=pool_size,
                socket_timeout=socket_timeout,
                decode_responses=True,
            )
            self._client = redis.Redis(connection_pool=self._pool)
            logger.info("Created Redis statistics pool", pool_size=pool_size)

    def get(self, key: str) -> Optional[str]:
        try:
            value = self._client.get(key)
        except redis.RedisError as e:
            logger.error("Statistics lookup failed", key=key, error=str(e))
            raise StatisticsStoreError(f"Failed to read '{key}' from Redis: {e}") from e

        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set_many(self, items: Iterable[Tuple[str, str]], batch_size: int = 1000) -> int:
        """Write key/value pairs in pipelined batches.

        Returns the number of keys written.
        """
        written = 0
        batch: Dict[str, str] = {}
        try:
            for key, value in items:
                batch[key] = value
                if len(batch) >= batch_size:
                    self._write_batch(batch)
                    written += len(batch)
                    batch = {}
            if batch:
                self._write_batch(batch)
                written += len(batch)
        except redis.RedisError as e:
            logger.error("Statistics write failed", written=written, error=str(e))
            raise StatisticsStoreError(f"Failed to write statistics to Redis: {e}") from e

        return written

    def _write_batch(self, batch: Dict[str, str]) -> None:
        with self._client.pipeline(transaction=False) as pipe:
            pipe.mset(batch)
            pipe.execute()

    def health_check(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.warning("Redis health check failed", error=str(e))
            return False

    def close(self) -> None:
        self._client.close()
        # A pool passed to redis.Redis is not closed by the client.
        if self._pool is not None:
            self._pool.disconnect()
        logger.debug("Redis statistics store closed")
