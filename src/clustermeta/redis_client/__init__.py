"""Redis client wrapper.

Database Layout:
- DB 0: Aggregated cluster metadata snapshot
- DB 1: Credential resolver configs
"""

from .client import RedisClient, RedisDB

__all__ = [
    "RedisClient",
    "RedisDB",
]
