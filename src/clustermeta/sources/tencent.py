"""Tencent Cloud TKE discovery source."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from pathlib import Path

from tencentcloud.common import credential
from tencentcloud.common.exception.tencent_cloud_sdk_exception import TencentCloudSDKException
from tencentcloud.tke.v20180525 import models, tke_client

from clustermeta.exceptions import SourceConfigurationError, SourceUnavailableError
from clustermeta.models import ClusterMetadata, CredentialResolverKind, CredResolverConfig
from clustermeta.observability import get_logger

from .base import DiscoverySource

logger = get_logger(__name__)

ATTRIBUTE_PROFILE = "profile"
ATTRIBUTE_REGIONS = "regions"

# tccli stores one JSON credential file per profile
TCCLI_DIR = Path.home() / ".tccli"
PAGE_SIZE = 100


def _profile_credential(profile: str, directory: Path = TCCLI_DIR) -> credential.Credential:
    path = directory / f"{profile}.credential"
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return credential.Credential(data["secretId"], data["secretKey"])
    except (OSError, ValueError, KeyError) as e:
        raise TencentCloudSDKException("ClientSideError", f"unreadable profile {path}: {e}") from e


def _credential_for(cred_resolver: CredResolverConfig):
    """Get Tencent Cloud credential based on the resolver kind.

    Raises:
        TencentCloudSDKException: no credential could be resolved
    """
    kind = cred_resolver.kind
    if kind == CredentialResolverKind.PROFILE:
        return _profile_credential(cred_resolver.resolver_attributes[ATTRIBUTE_PROFILE])
    if kind == CredentialResolverKind.IMDS:
        return credential.CVMRoleCredential()
    if kind == CredentialResolverKind.ENV:
        cred = credential.EnvironmentVariableCredential().get_credential()
        if cred is None:
            raise TencentCloudSDKException(
                "ClientSideError", "TENCENTCLOUD_SECRET_ID/TENCENTCLOUD_SECRET_KEY not set"
            )
        return cred
    return credential.DefaultCredentialProvider().get_credential()


def _default_client(cred_resolver: CredResolverConfig, region: str) -> tke_client.TkeClient:
    return tke_client.TkeClient(_credential_for(cred_resolver), region)


def _tags(cluster) -> dict[str, str]:
    tags = {}
    for spec in cluster.TagSpecification or []:
        for tag in spec.Tags or []:
            if tag.Key:
                tags[tag.Key] = tag.Value or ""
    return tags


class TkeSource(DiscoverySource):
    """TKE clusters visible to one Tencent Cloud account."""

    def __init__(
        self,
        cred_resolver: CredResolverConfig,
        client_factory: Callable[[CredResolverConfig, str], tke_client.TkeClient] | None = None,
    ):
        if (
            cred_resolver.kind == CredentialResolverKind.PROFILE
            and not cred_resolver.resolver_attributes.get(ATTRIBUTE_PROFILE)
        ):
            raise SourceConfigurationError(
                f"Credential resolver {cred_resolver.id} has kind PROFILE but no profile attribute"
            )
        self.cred_resolver = cred_resolver
        self._client_factory = client_factory or _default_client

    @property
    def description(self) -> str:
        alias = self.cred_resolver.account_alias
        suffix = f" ({alias})" if alias else ""
        return f"Tencent:{self.cred_resolver.account_id}{suffix}"

    async def list_clusters(self) -> list[ClusterMetadata]:
        return await asyncio.to_thread(self._list_all_regions)

    def _regions(self) -> list[str]:
        raw = self.cred_resolver.resolver_attributes.get(ATTRIBUTE_REGIONS, "")
        regions = [r.strip() for r in raw.split(",") if r.strip()]
        if not regions:
            raise SourceUnavailableError(self.description, "no region configured")
        return regions

    def _list_all_regions(self) -> list[ClusterMetadata]:
        clusters = []
        try:
            for region in self._regions():
                client = self._client_factory(self.cred_resolver, region)
                clusters.extend(self._list_region(client, region))
        except TencentCloudSDKException as e:
            raise SourceUnavailableError(self.description, str(e)) from e
        return clusters

    def _list_region(self, client: tke_client.TkeClient, region: str) -> list[ClusterMetadata]:
        clusters = []
        offset = 0
        while True:
            request = models.DescribeClustersRequest()
            request.Limit = PAGE_SIZE
            request.Offset = offset
            response = client.DescribeClusters(request)
            page = response.Clusters or []
            for cluster in page:
                tags = _tags(cluster)
                tags["region"] = region
                if cluster.ClusterId:
                    tags["clusterId"] = cluster.ClusterId
                clusters.append(
                    ClusterMetadata(
                        cluster_name=cluster.ClusterName,
                        cred_resolver_id=self.cred_resolver.id,
                        cluster_tags=tags,
                    )
                )
            offset += len(page)
            if not page or offset >= (response.TotalCount or 0):
                break

        logger.debug(
            "Listed TKE clusters",
            account_id=self.cred_resolver.account_id,
            region=region,
            count=len(clusters),
        )
        return clusters
