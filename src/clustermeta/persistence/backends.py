"""Document storage backends.

A backend stores one JSON document (a list of objects) and replaces it whole
on every save. Saves are all-or-nothing: a failed save leaves the previously
stored document readable and intact.
"""

import asyncio
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from redis.exceptions import RedisError

from clustermeta.config import StorageBackendType, StorageSettings
from clustermeta.exceptions import PersistenceError
from clustermeta.observability import get_logger
from clustermeta.redis_client import RedisClient, RedisDB

logger = get_logger(__name__)


class StorageBackend(ABC):
    """Durable store for a single list-of-objects document."""

    @abstractmethod
    async def load(self) -> list[dict[str, Any]] | None:
        """Return the stored document, or None when nothing was saved yet."""

    @abstractmethod
    async def save(self, items: list[dict[str, Any]]) -> None:
        """Replace the stored document."""

    @abstractmethod
    def describe(self) -> str:
        """Human-readable location, used in logs."""


def _decode(raw: str, location: str) -> list[dict[str, Any]]:
    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Corrupt document at {location}: {e}") from e
    if not isinstance(document, list):
        raise PersistenceError(f"Corrupt document at {location}: expected a list")
    return document


class FileStorageBackend(StorageBackend):
    """JSON file written through a temp file and an atomic rename."""

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()

    def describe(self) -> str:
        return str(self.path)

    async def load(self) -> list[dict[str, Any]] | None:
        return await asyncio.to_thread(self._read)

    async def save(self, items: list[dict[str, Any]]) -> None:
        await asyncio.to_thread(self._write, items)

    def _read(self) -> list[dict[str, Any]] | None:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceError(f"Failed to read {self.path}: {e}") from e
        return _decode(raw, str(self.path))

    def _write(self, items: list[dict[str, Any]]) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                json.dump(items, tmp, indent=2, default=str)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to write {self.path}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.warning("Failed to remove temp file", path=tmp_name)


class RedisStorageBackend(StorageBackend):
    """Document stored under one Redis key, written with a single SET."""

    def __init__(self, redis_client: RedisClient, key: str, db: RedisDB = RedisDB.METADATA):
        self.redis = redis_client
        self.key = key
        self.db = db

    def describe(self) -> str:
        return f"redis://{self.db.name.lower()}/{self.key}"

    async def load(self) -> list[dict[str, Any]] | None:
        try:
            raw = await self.redis.get_document(self.db, self.key)
        except (RedisError, RuntimeError) as e:
            raise PersistenceError(f"Failed to read {self.describe()}: {e}") from e
        if raw is None:
            return None
        return _decode(raw, self.describe())

    async def save(self, items: list[dict[str, Any]]) -> None:
        try:
            await self.redis.set_document(self.db, self.key, json.dumps(items, default=str))
        except (RedisError, RuntimeError) as e:
            raise PersistenceError(f"Failed to write {self.describe()}: {e}") from e


def create_storage_backends(
    settings: StorageSettings,
    redis_client: RedisClient | None = None,
) -> tuple[StorageBackend, StorageBackend]:
    """Build the (snapshot, credential resolver) backends from settings."""
    if settings.backend == StorageBackendType.REDIS:
        if redis_client is None:
            raise PersistenceError("Redis storage backend selected but no Redis client given")
        return (
            RedisStorageBackend(redis_client, settings.metadata_key, RedisDB.METADATA),
            RedisStorageBackend(redis_client, settings.cred_resolver_key, RedisDB.CONFIG),
        )
    return (
        FileStorageBackend(settings.metadata_path),
        FileStorageBackend(settings.cred_resolver_path),
    )
