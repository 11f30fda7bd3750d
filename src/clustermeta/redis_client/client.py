"""Async Redis wrapper for the Redis storage backend.

Database layout:
- DB 0 (METADATA): aggregated cluster snapshot
- DB 1 (CONFIG): credential resolver configs

Each document is one JSON string under one key, so a save is a single SET
and readers see either the old or the new document.
"""

from enum import IntEnum
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError


class RedisDB(IntEnum):
    """Redis database numbers."""

    METADATA = 0
    CONFIG = 1


class RedisClient:
    """One connection pool per database in RedisDB."""

    def __init__(self, url: str = "redis://localhost:6379"):
        self._url = url
        self._clients: dict[RedisDB, redis.Redis] = {}

    async def connect(self) -> None:
        for db in RedisDB:
            self._clients[db] = redis.Redis.from_url(
                self._url, db=db.value, decode_responses=True
            )

    async def close(self) -> None:
        for client in self._clients.values():
            await client.aclose()
        self._clients.clear()

    def get_client(self, db: RedisDB) -> redis.Redis:
        try:
            return self._clients[db]
        except KeyError:
            raise RuntimeError("Redis client not connected. Call connect() first.") from None

    async def get_document(self, db: RedisDB, key: str) -> str | None:
        """Return the raw document stored at key, or None if the key is unset."""
        return await self.get_client(db).get(key)

    async def set_document(self, db: RedisDB, key: str, document: str) -> None:
        """Replace the document stored at key."""
        await self.get_client(db).set(key, document)

    async def health_check(self) -> dict[str, Any]:
        """Ping every database.

        Returns:
            {"status": "healthy" | "unhealthy", "databases": {name: status}}
        """
        databases = {}
        for db in RedisDB:
            try:
                await self.get_client(db).ping()
                databases[db.name.lower()] = "healthy"
            except (RuntimeError, RedisError) as e:
                databases[db.name.lower()] = f"unhealthy: {e}"

        healthy = all(state == "healthy" for state in databases.values())
        return {"status": "healthy" if healthy else "unhealthy", "databases": databases}
