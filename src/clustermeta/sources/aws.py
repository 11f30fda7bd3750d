"""AWS EKS discovery source."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from clustermeta.exceptions import SourceConfigurationError, SourceUnavailableError
from clustermeta.models import ClusterMetadata, CredentialResolverKind, CredResolverConfig
from clustermeta.observability import get_logger

from .base import DiscoverySource

logger = get_logger(__name__)

ATTRIBUTE_PROFILE = "profile"
ATTRIBUTE_REGIONS = "regions"


def _session_for(cred_resolver: CredResolverConfig) -> boto3.Session:
    """Build a boto3 session matching the resolver kind."""
    if cred_resolver.kind == CredentialResolverKind.PROFILE:
        return boto3.Session(profile_name=cred_resolver.resolver_attributes[ATTRIBUTE_PROFILE])
    # DEFAULT, ENV and IMDS all resolve through the default credential chain
    return boto3.Session()


class EksSource(DiscoverySource):
    """EKS clusters visible to one AWS account."""

    def __init__(
        self,
        cred_resolver: CredResolverConfig,
        session_factory: Callable[[CredResolverConfig], boto3.Session] = _session_for,
    ):
        if (
            cred_resolver.kind == CredentialResolverKind.PROFILE
            and not cred_resolver.resolver_attributes.get(ATTRIBUTE_PROFILE)
        ):
            raise SourceConfigurationError(
                f"Credential resolver {cred_resolver.id} has kind PROFILE but no profile attribute"
            )
        self.cred_resolver = cred_resolver
        self._session_factory = session_factory

    @property
    def description(self) -> str:
        alias = self.cred_resolver.account_alias
        suffix = f" ({alias})" if alias else ""
        return f"AWS:{self.cred_resolver.account_id}{suffix}"

    async def list_clusters(self) -> list[ClusterMetadata]:
        return await asyncio.to_thread(self._list_all_regions)

    def _regions(self, session: boto3.Session) -> list[str]:
        raw = self.cred_resolver.resolver_attributes.get(ATTRIBUTE_REGIONS, "")
        regions = [r.strip() for r in raw.split(",") if r.strip()]
        if not regions and session.region_name:
            regions = [session.region_name]
        if not regions:
            raise SourceUnavailableError(self.description, "no region configured")
        return regions

    def _list_all_regions(self) -> list[ClusterMetadata]:
        session = self._session_factory(self.cred_resolver)
        clusters = []
        try:
            for region in self._regions(session):
                clusters.extend(self._list_region(session, region))
        except (BotoCoreError, ClientError) as e:
            raise SourceUnavailableError(self.description, str(e)) from e
        return clusters

    def _list_region(self, session: boto3.Session, region: str) -> list[ClusterMetadata]:
        eks = session.client("eks", region_name=region)
        clusters = []
        for page in eks.get_paginator("list_clusters").paginate():
            for name in page.get("clusters", []):
                described = eks.describe_cluster(name=name)["cluster"]
                tags = dict(described.get("tags") or {})
                tags["region"] = region
                clusters.append(
                    ClusterMetadata(
                        cluster_name=name,
                        cred_resolver_id=self.cred_resolver.id,
                        cluster_tags=tags,
                    )
                )
        logger.debug(
            "Listed EKS clusters",
            account_id=self.cred_resolver.account_id,
            region=region,
            count=len(clusters),
        )
        return clusters
