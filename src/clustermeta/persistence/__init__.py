"""Durable storage for snapshots and configuration documents."""

from clustermeta.exceptions import PersistenceError

from .backends import (
    FileStorageBackend,
    RedisStorageBackend,
    StorageBackend,
    create_storage_backends,
)

__all__ = [
    "FileStorageBackend",
    "PersistenceError",
    "RedisStorageBackend",
    "StorageBackend",
    "create_storage_backends",
]
