"""Aggregated cluster metadata snapshot repository."""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import TypeAdapter, ValidationError

from clustermeta.exceptions import PersistenceError
from clustermeta.models import AggregatedClusterMetadata
from clustermeta.persistence import StorageBackend

_snapshot_adapter = TypeAdapter(list[AggregatedClusterMetadata])


class AggregatedMetadataRepository:
    """Loads and saves the whole aggregated snapshot as one document."""

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    async def load(self) -> list[AggregatedClusterMetadata]:
        """Load the last saved snapshot.

        Returns:
            Saved records, or an empty list when nothing was saved yet
        """
        document = await self.backend.load()
        if document is None:
            return []
        try:
            return _snapshot_adapter.validate_python(document)
        except ValidationError as e:
            raise PersistenceError(
                f"Invalid snapshot at {self.backend.describe()}: {e}"
            ) from e

    async def save(self, records: Sequence[AggregatedClusterMetadata]) -> None:
        """Replace the saved snapshot with records."""
        document = _snapshot_adapter.dump_python(
            list(records), mode="json", by_alias=True
        )
        await self.backend.save(document)
