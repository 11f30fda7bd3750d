"""Azure AKS discovery source."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from azure.core.credentials import TokenCredential
from azure.core.exceptions import AzureError
from azure.identity import DefaultAzureCredential, EnvironmentCredential, ManagedIdentityCredential
from azure.mgmt.containerservice import ContainerServiceClient

from clustermeta.exceptions import SourceConfigurationError, SourceUnavailableError
from clustermeta.models import ClusterMetadata, CredentialResolverKind, CredResolverConfig
from clustermeta.observability import get_logger

from .base import DiscoverySource

logger = get_logger(__name__)


def _credential_for(cred_resolver: CredResolverConfig) -> TokenCredential:
    """Get Azure credential based on the resolver kind."""
    if cred_resolver.kind == CredentialResolverKind.ENV:
        return EnvironmentCredential()
    if cred_resolver.kind == CredentialResolverKind.IMDS:
        return ManagedIdentityCredential()
    return DefaultAzureCredential()


def _resource_group(resource_id: str | None) -> str | None:
    # /subscriptions/{sub}/resourceGroups/{rg}/providers/...
    parts = (resource_id or "").split("/")
    for i, part in enumerate(parts[:-1]):
        if part.lower() == "resourcegroups":
            return parts[i + 1]
    return None


class AksSource(DiscoverySource):
    """AKS clusters in one Azure subscription."""

    def __init__(
        self,
        cred_resolver: CredResolverConfig,
        client_factory: Callable[[CredResolverConfig], ContainerServiceClient] | None = None,
    ):
        if cred_resolver.kind == CredentialResolverKind.PROFILE:
            raise SourceConfigurationError(
                "Credential resolver kind PROFILE is not supported for Azure"
            )
        self.cred_resolver = cred_resolver
        self._client_factory = client_factory or self._default_client

    @staticmethod
    def _default_client(cred_resolver: CredResolverConfig) -> ContainerServiceClient:
        return ContainerServiceClient(
            credential=_credential_for(cred_resolver),
            subscription_id=cred_resolver.account_id,
        )

    @property
    def description(self) -> str:
        alias = self.cred_resolver.account_alias
        suffix = f" ({alias})" if alias else ""
        return f"Azure:{self.cred_resolver.account_id}{suffix}"

    async def list_clusters(self) -> list[ClusterMetadata]:
        return await asyncio.to_thread(self._list)

    def _list(self) -> list[ClusterMetadata]:
        client = self._client_factory(self.cred_resolver)
        clusters = []
        try:
            for cluster in client.managed_clusters.list():
                tags = dict(cluster.tags or {})
                if cluster.location:
                    tags["location"] = cluster.location
                if rg := _resource_group(cluster.id):
                    tags["resourceGroup"] = rg
                clusters.append(
                    ClusterMetadata(
                        cluster_name=cluster.name,
                        cred_resolver_id=self.cred_resolver.id,
                        cluster_tags=tags,
                    )
                )
        except AzureError as e:
            raise SourceUnavailableError(self.description, str(e)) from e
        finally:
            client.close()

        logger.debug(
            "Listed AKS clusters",
            subscription_id=self.cred_resolver.account_id,
            count=len(clusters),
        )
        return clusters
