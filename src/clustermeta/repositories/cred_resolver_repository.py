"""Credential resolver config repository."""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import TypeAdapter, ValidationError

from clustermeta.exceptions import PersistenceError
from clustermeta.models import CredResolverConfig
from clustermeta.persistence import StorageBackend

_configs_adapter = TypeAdapter(list[CredResolverConfig])


class CredResolverRepository:
    """Loads and saves every credential resolver config as one document."""

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    async def load(self) -> list[CredResolverConfig]:
        document = await self.backend.load()
        if document is None:
            return []
        try:
            return _configs_adapter.validate_python(document)
        except ValidationError as e:
            raise PersistenceError(
                f"Invalid credential resolver configs at {self.backend.describe()}: {e}"
            ) from e

    async def save(self, configs: Sequence[CredResolverConfig]) -> None:
        document = _configs_adapter.dump_python(
            list(configs), mode="json", by_alias=True
        )
        await self.backend.save(document)
