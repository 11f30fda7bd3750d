"""Aggregated cluster metadata store.

Holds the last computed snapshot in memory and persists it through the
repository. Snapshots are immutable mappings replaced by a single reference
assignment: readers never lock and never see a half-replaced snapshot, while
writers serialize on one lock for the whole swap + persist sequence.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from types import MappingProxyType

from clustermeta.exceptions import PersistenceError
from clustermeta.models import (
    AggregatedClusterMetadata,
    ClusterInformationStatus,
    Provenance,
)
from clustermeta.observability import get_logger
from clustermeta.repositories import AggregatedMetadataRepository

logger = get_logger(__name__)


def _freeze(
    records: Sequence[AggregatedClusterMetadata],
) -> Mapping[str, AggregatedClusterMetadata]:
    snapshot: dict[str, AggregatedClusterMetadata] = {}
    for record in records:
        if record.cluster_name in snapshot:
            raise ValueError(f"Duplicate cluster name in snapshot: {record.cluster_name}")
        if record.status is None:
            raise ValueError(f"Cluster {record.cluster_name} has no status")
        snapshot[record.cluster_name] = record.model_copy(deep=True)
    return MappingProxyType(snapshot)


class AggregatedStore:
    """In-memory snapshot of aggregated clusters backed by a repository."""

    def __init__(self, repository: AggregatedMetadataRepository):
        self.repository = repository
        self._snapshot: Mapping[str, AggregatedClusterMetadata] = MappingProxyType({})
        self._write_lock = asyncio.Lock()

    async def load(self) -> None:
        """Hydrate the snapshot from the last persisted one.

        Raises:
            PersistenceError: the stored snapshot is unreadable or invalid
        """
        records = await self.repository.load()
        try:
            snapshot = _freeze(records)
        except ValueError as e:
            raise PersistenceError(
                f"Invalid snapshot at {self.repository.backend.describe()}: {e}"
            ) from e
        async with self._write_lock:
            self._snapshot = snapshot
        logger.info("Loaded aggregated cluster snapshot", count=len(records))

    def list(self) -> list[AggregatedClusterMetadata]:
        snapshot = self._snapshot
        return [record.model_copy(deep=True) for record in snapshot.values()]

    def get(self, cluster_name: str) -> AggregatedClusterMetadata | None:
        record = self._snapshot.get(cluster_name)
        return record.model_copy(deep=True) if record is not None else None

    def __len__(self) -> int:
        return len(self._snapshot)

    async def mark_registered(self, cluster_name: str) -> AggregatedClusterMetadata | None:
        """Flip a cluster's provenance to registered, keeping its credential health.

        Returns:
            A copy of the updated record, or None if the cluster is not in the snapshot
        """
        async with self._write_lock:
            current = self._snapshot.get(cluster_name)
            if current is None:
                logger.info(
                    "Cluster not in snapshot, skipping registered update",
                    cluster_name=cluster_name,
                )
                return None

            updated = current.model_copy(deep=True)
            updated.status = ClusterInformationStatus.combine(
                Provenance.REGISTERED, current.status.credential_health
            )
            snapshot = dict(self._snapshot)
            snapshot[cluster_name] = updated
            self._snapshot = MappingProxyType(snapshot)

            await self.repository.save(list(snapshot.values()))

        logger.info(
            "Cluster marked registered",
            cluster_name=cluster_name,
            status=updated.status.value,
        )
        return updated.model_copy(deep=True)

    async def replace_and_persist(
        self, records: Sequence[AggregatedClusterMetadata]
    ) -> None:
        """Swap in records as the new snapshot, then persist it.

        Raises:
            ValueError: records contain a duplicate name or an unset status
            PersistenceError: the snapshot could not be saved; the in-memory
                snapshot already holds the new records
        """
        snapshot = _freeze(records)
        async with self._write_lock:
            self._snapshot = snapshot
            await self.repository.save(list(snapshot.values()))
        logger.info("Aggregated cluster snapshot replaced", count=len(snapshot))
