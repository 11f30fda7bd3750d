"""Credential resolver API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, Response, status

from clustermeta.exceptions import PersistenceError
from clustermeta.models import CredResolverConfig
from clustermeta.services import CredResolverService

router = APIRouter()


def get_cred_resolver_service(request: Request) -> CredResolverService:
    return request.app.state.cred_resolver_service


def _not_found(cred_resolver_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": "CRED_RESOLVER_NOT_FOUND",
            "message": f"Credential resolver '{cred_resolver_id}' not found",
        },
    )


@router.get(
    "/cred-resolvers",
    response_model=list[CredResolverConfig],
    summary="List credential resolvers",
)
async def list_cred_resolvers(request: Request):
    return get_cred_resolver_service(request).list_cred_resolvers()


@router.get(
    "/cred-resolvers/{cred_resolver_id}",
    response_model=CredResolverConfig,
    summary="Get credential resolver",
)
async def get_cred_resolver(request: Request, cred_resolver_id: str):
    config = get_cred_resolver_service(request).get_cred_resolver(cred_resolver_id)
    if config is None:
        raise _not_found(cred_resolver_id)
    return config


@router.put(
    "/cred-resolvers/{cred_resolver_id}",
    response_model=CredResolverConfig,
    summary="Create or replace credential resolver",
)
async def put_cred_resolver(
    request: Request,
    cred_resolver_id: str,
    config: CredResolverConfig,
):
    if config.id != cred_resolver_id:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "error": "ID_MISMATCH",
                "message": "accountId must match the path parameter",
            },
        )
    try:
        await get_cred_resolver_service(request).set_cred_resolver(config)
    except PersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "PERSISTENCE_FAILED", "message": str(e)},
        )
    return config


@router.delete(
    "/cred-resolvers/{cred_resolver_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete credential resolver",
)
async def delete_cred_resolver(request: Request, cred_resolver_id: str):
    try:
        deleted = await get_cred_resolver_service(request).delete_cred_resolver(
            cred_resolver_id
        )
    except PersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "PERSISTENCE_FAILED", "message": str(e)},
        )
    if not deleted:
        raise _not_found(cred_resolver_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
