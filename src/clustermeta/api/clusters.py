"""Aggregated cluster API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, status

from clustermeta.exceptions import PersistenceError
from clustermeta.models import AggregatedClusterMetadata
from clustermeta.observability import get_logger
from clustermeta.services import ClusterMetadataService

logger = get_logger(__name__)

router = APIRouter()


def get_cluster_metadata_service(request: Request) -> ClusterMetadataService:
    return request.app.state.cluster_metadata_service


def _not_found(cluster_name: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": "CLUSTER_NOT_FOUND",
            "message": f"Cluster '{cluster_name}' not found",
        },
    )


def _persistence_failed(e: PersistenceError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"error": "PERSISTENCE_FAILED", "message": str(e)},
    )


@router.get(
    "/clusters",
    response_model=list[AggregatedClusterMetadata],
    summary="List aggregated clusters",
    description="List every cluster from the last sync pass with its status.",
)
async def list_clusters(request: Request):
    service = get_cluster_metadata_service(request)
    return service.list_cluster_metadatas()


@router.post(
    "/clusters/sync",
    summary="Sync available clusters",
    description="Query every enabled discovery source and replace the aggregated view.",
)
async def sync_clusters(request: Request):
    """Run one sync pass.

    A failing discovery source does not fail the request; only a failure to
    persist the new snapshot does.
    """
    service = get_cluster_metadata_service(request)
    try:
        await service.sync_available_clusters(
            request.app.state.settings,
            request.app.state.cred_resolver_service,
        )
    except PersistenceError as e:
        logger.error("Sync failed to persist snapshot", error=str(e))
        raise _persistence_failed(e)

    return {"status": "synced", "clusters": len(service.list_cluster_metadatas())}


@router.get(
    "/clusters/{cluster_name}",
    response_model=AggregatedClusterMetadata,
    summary="Get cluster",
)
async def get_cluster(request: Request, cluster_name: str):
    service = get_cluster_metadata_service(request)
    metadata = service.get_cluster_metadata(cluster_name)
    if metadata is None:
        raise _not_found(cluster_name)
    return metadata


@router.post(
    "/clusters/{cluster_name}/registered",
    response_model=AggregatedClusterMetadata,
    summary="Mark cluster registered",
    description="Flip a cluster to registered after it was written to the kubeconfig.",
)
async def mark_registered(request: Request, cluster_name: str):
    service = get_cluster_metadata_service(request)
    try:
        updated = await service.set_cluster_registered_status(cluster_name)
    except PersistenceError as e:
        raise _persistence_failed(e)
    if updated is None:
        raise _not_found(cluster_name)
    return updated
