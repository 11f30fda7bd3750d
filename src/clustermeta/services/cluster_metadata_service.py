"""Cluster metadata sync orchestration.

One sync pass:
1. Query every discovery source concurrently, each bounded by a timeout
2. Fold the results in source registration order (MergeEngine)
3. Classify every aggregated record (status resolver)
4. Replace and persist the aggregated snapshot

A failing or timed-out source only loses its own contribution. Only a
persistence failure fails the pass.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from uuid import uuid4

from clustermeta.config import DiscoverySettings, Settings
from clustermeta.models import AggregatedClusterMetadata
from clustermeta.observability import (
    SyncContext,
    get_logger,
    log_source_query_end,
    log_source_query_start,
)
from clustermeta.sources import DiscoverySource, build_sources

from .aggregated_store import AggregatedStore
from .cred_resolver_service import CredResolverService
from .merge import MergeEngine, SourceResult
from .status_resolver import CredentialHealthLookup, resolve_status

logger = get_logger(__name__)


class ClusterMetadataService:
    """Drives sync passes and serves the aggregated view."""

    def __init__(
        self,
        store: AggregatedStore,
        credentials: CredentialHealthLookup,
        discovery: DiscoverySettings | None = None,
        merge_engine: MergeEngine | None = None,
    ):
        self.store = store
        self.credentials = credentials
        self.discovery = discovery or DiscoverySettings()
        self.merge_engine = merge_engine or MergeEngine()

    # =========================================================================
    # Read paths
    # =========================================================================

    def list_cluster_metadatas(self) -> list[AggregatedClusterMetadata]:
        return self.store.list()

    def get_cluster_metadata(self, cluster_name: str) -> AggregatedClusterMetadata | None:
        return self.store.get(cluster_name)

    async def set_cluster_registered_status(
        self, cluster_name: str
    ) -> AggregatedClusterMetadata | None:
        """Mark a cluster registered, e.g. right after writing it to the kubeconfig.

        Returns:
            The updated record, or None if the cluster is unknown
        """
        return await self.store.mark_registered(cluster_name)

    # =========================================================================
    # Sync
    # =========================================================================

    async def sync_available_clusters(
        self,
        settings: Settings,
        cred_resolvers: CredResolverService,
    ) -> None:
        """Enumerate the enabled sources and run a sync pass over them."""
        sources = build_sources(settings, cred_resolvers.list_cred_resolvers())
        await self.sync(sources)

    async def sync(self, sources: Sequence[DiscoverySource]) -> None:
        """Run one full discovery pass over sources.

        Raises:
            PersistenceError: the new snapshot could not be saved
        """
        async with SyncContext(sync_id=uuid4().hex):
            started = time.monotonic()
            logger.info(
                "Sync started",
                sources=[source.description for source in sources],
            )

            results = await self._collect(sources)
            outcome = self.merge_engine.merge(results)

            for name, aggregated in outcome.aggregated.items():
                aggregated.status = resolve_status(
                    aggregated,
                    is_locally_registered=name in outcome.registered,
                    credentials=self.credentials,
                )

            await self.store.replace_and_persist(list(outcome.aggregated.values()))

            logger.info(
                "Sync completed",
                clusters=len(outcome.aggregated),
                failed_sources=sum(1 for r in results if r.failed),
                duration_ms=round((time.monotonic() - started) * 1000, 2),
            )

    async def _collect(self, sources: Sequence[DiscoverySource]) -> list[SourceResult]:
        """Query all sources concurrently; results keep the sources' order."""
        semaphore = asyncio.Semaphore(self.discovery.max_concurrency)

        async def query(source: DiscoverySource) -> SourceResult:
            async with semaphore:
                return await self._query_source(source)

        return list(await asyncio.gather(*(query(source) for source in sources)))

    async def _query_source(self, source: DiscoverySource) -> SourceResult:
        description = source.description
        log_source_query_start(logger, description)
        started = time.monotonic()

        try:
            records = await asyncio.wait_for(
                source.list_clusters(),
                timeout=self.discovery.source_timeout_seconds,
            )
        except asyncio.TimeoutError:
            error = f"timed out after {self.discovery.source_timeout_seconds}s"
        except Exception as e:
            error = str(e) or e.__class__.__name__
        else:
            log_source_query_end(
                logger,
                description,
                duration_ms=(time.monotonic() - started) * 1000,
                clusters=len(records),
            )
            return SourceResult(
                description=description,
                records=tuple(records),
                authoritative=source.authoritative,
            )

        log_source_query_end(
            logger,
            description,
            duration_ms=(time.monotonic() - started) * 1000,
            error=error,
        )
        return SourceResult(
            description=description,
            authoritative=source.authoritative,
            error=error,
        )
