"""
Redis implementation of the KeyValueStore interface.
Optional backend for deployments that already run Redis; same key layout as SQLite.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..domain.ports import KeyValueStore, StoreError


logger = logging.getLogger(__name__)


class RedisKeyValueStore(KeyValueStore):
    """
    Stores plain string values with GET/SET over a pooled async connection.
    SET replaces the whole value, so concurrent writers to a key resolve last-write-wins.
    """

    def __init__(
        self,
        url: str,
        max_connections: int = 10,
        socket_timeout: float = 5.0,
        socket_connect_timeout: float = 5.0,
        client: Optional[redis.Redis] = None
    ):
        """
        Initialize the store.

        Args:
            url: Redis connection URL (redis://host:port/db)
            max_connections: Maximum connections in pool
            socket_timeout: Socket timeout in seconds
            socket_connect_timeout: Connection timeout in seconds
            client: Preconfigured client (mainly for tests)
        """
        self.url = url
        self._client = client
        self._pool_config = {
            "max_connections": max_connections,
            "socket_timeout": socket_timeout,
            "socket_connect_timeout": socket_connect_timeout,
            "decode_responses": True
        }

    async def open(self) -> None:
        """
        Connect and verify the server answers.

        Raises:
            StoreError: If Redis is unreachable
        """
        if self._client is None:
            self._client = redis.Redis.from_url(self.url, **self._pool_config)

        try:
            await self._client.ping()
        except RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}", extra={"component": "redis_store"})
            await self.close()
            raise StoreError(f"Failed to open Redis store: {e}") from e

        logger.info("Connected to Redis", extra={"component": "redis_store"})

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Redis connection closed", extra={"component": "redis_store"})

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            raise StoreError("Redis store is not open")
        return self._client

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.client.get(key)
        except RedisError as e:
            logger.error(
                f"Redis read failed: {e}",
                extra={"component": "redis_store", "key": key}
            )
            raise StoreError(f"Failed to read {key}: {e}") from e

    async def put(self, key: str, value: str) -> None:
        try:
            await self.client.set(key, value)
        except RedisError as e:
            logger.error(
                f"Redis write failed: {e}",
                extra={"component": "redis_store", "key": key}
            )
            raise StoreError(f"Failed to write {key}: {e}") from e

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except (RedisError, StoreError) as e:
            logger.warning(f"Redis ping failed: {e}", extra={"component": "redis_store"})
            return False
