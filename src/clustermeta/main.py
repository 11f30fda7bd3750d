"""clustermeta FastAPI application.

Serves the aggregated view of Kubernetes clusters discovered across the local
kubeconfig, cloud vendor accounts and the inventory service:
- On-demand sync passes over every enabled discovery source
- Lookup of aggregated clusters and their status
- Marking clusters registered after they were added to the kubeconfig
- Credential resolver management
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from clustermeta.config import StorageBackendType, get_settings
from clustermeta.observability import get_logger, setup_logging
from clustermeta.persistence import create_storage_backends
from clustermeta.redis_client import RedisClient
from clustermeta.repositories import AggregatedMetadataRepository, CredResolverRepository
from clustermeta.services import AggregatedStore, ClusterMetadataService, CredResolverService

from .api import clusters, cred_resolvers, health

settings = get_settings()
setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown of:
    - Redis connections (when Redis is the storage backend)
    - Credential resolver and aggregated snapshot loading
    """
    logger.info("Starting clustermeta service", version=settings.app_version)

    redis_client = None
    if settings.storage.backend == StorageBackendType.REDIS:
        redis_client = RedisClient(settings.redis.url)
        await redis_client.connect()
        app.state.redis = redis_client

    metadata_backend, cred_backend = create_storage_backends(settings.storage, redis_client)
    logger.info(
        "Storage initialized",
        snapshot=metadata_backend.describe(),
        cred_resolvers=cred_backend.describe(),
    )

    cred_resolver_service = CredResolverService(CredResolverRepository(cred_backend))
    await cred_resolver_service.load()

    store = AggregatedStore(AggregatedMetadataRepository(metadata_backend))
    await store.load()

    app.state.settings = settings
    app.state.cred_resolver_service = cred_resolver_service
    app.state.cluster_metadata_service = ClusterMetadataService(
        store,
        cred_resolver_service,
        discovery=settings.discovery,
    )

    logger.info("clustermeta service started successfully")

    yield

    logger.info("Shutting down clustermeta service")
    if redis_client is not None:
        await redis_client.close()
    logger.info("clustermeta service shutdown complete")


app = FastAPI(
    title="Cluster Metadata Service",
    description="Aggregated view of discoverable Kubernetes clusters and their credential status",
    version=settings.app_version,
    debug=settings.debug,
    docs_url="/docs",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.include_router(clusters.router, prefix="/api/v1", tags=["Clusters"])
app.include_router(cred_resolvers.router, prefix="/api/v1", tags=["Credential Resolvers"])
app.include_router(health.router, tags=["Health"])


@app.get("/")
async def root():
    """Root endpoint with service info."""
    return {
        "service": "clustermeta",
        "version": settings.app_version,
        "docs": "/docs",
    }
