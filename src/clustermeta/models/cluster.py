"""Cluster metadata models."""

from enum import Enum

from pydantic import ConfigDict, Field

from .base import ClusterMetaBaseModel


class Provenance(str, Enum):
    """Whether a cluster is present in the local kubeconfig."""

    REGISTERED = "REGISTERED"
    SUGGESTION = "SUGGESTION"


class CredentialHealth(str, Enum):
    """Whether the credential resolver referenced by a cluster is usable."""

    OK = "OK"
    NO_CRED_RESOLVER = "NO_CRED_RESOLVER"
    CRED_RESOLVER_NOTOK = "CRED_RESOLVER_NOTOK"


class ClusterInformationStatus(str, Enum):
    """Actionable status of an aggregated cluster (provenance x credential health)."""

    REGISTERED_OK = "REGISTERED_OK"
    REGISTERED_NOTOK_NO_CRED_RESOLVER = "REGISTERED_NOTOK_NO_CRED_RESOLVER"
    REGISTERED_NOTOK_CRED_RES_NOTOK = "REGISTERED_NOTOK_CRED_RES_NOTOK"
    SUGGESTION_OK = "SUGGESTION_OK"
    SUGGESTION_NOTOK_NO_CRED_RESOLVER = "SUGGESTION_NOTOK_NO_CRED_RESOLVER"
    SUGGESTION_NOTOK_CRED_RES_NOTOK = "SUGGESTION_NOTOK_CRED_RES_NOTOK"

    @classmethod
    def combine(
        cls, provenance: Provenance, health: CredentialHealth
    ) -> "ClusterInformationStatus":
        return _STATUS_BY_AXES[(Provenance(provenance), CredentialHealth(health))]

    @property
    def provenance(self) -> Provenance:
        return _AXES_BY_STATUS[self][0]

    @property
    def credential_health(self) -> CredentialHealth:
        return _AXES_BY_STATUS[self][1]


_STATUS_BY_AXES: dict[tuple[Provenance, CredentialHealth], ClusterInformationStatus] = {
    (Provenance.REGISTERED, CredentialHealth.OK): ClusterInformationStatus.REGISTERED_OK,
    (
        Provenance.REGISTERED,
        CredentialHealth.NO_CRED_RESOLVER,
    ): ClusterInformationStatus.REGISTERED_NOTOK_NO_CRED_RESOLVER,
    (
        Provenance.REGISTERED,
        CredentialHealth.CRED_RESOLVER_NOTOK,
    ): ClusterInformationStatus.REGISTERED_NOTOK_CRED_RES_NOTOK,
    (Provenance.SUGGESTION, CredentialHealth.OK): ClusterInformationStatus.SUGGESTION_OK,
    (
        Provenance.SUGGESTION,
        CredentialHealth.NO_CRED_RESOLVER,
    ): ClusterInformationStatus.SUGGESTION_NOTOK_NO_CRED_RESOLVER,
    (
        Provenance.SUGGESTION,
        CredentialHealth.CRED_RESOLVER_NOTOK,
    ): ClusterInformationStatus.SUGGESTION_NOTOK_CRED_RES_NOTOK,
}
_AXES_BY_STATUS = {status: axes for axes, status in _STATUS_BY_AXES.items()}


class ClusterMetadata(ClusterMetaBaseModel):
    """A cluster as reported by one discovery source.

    Immutable once returned by the source; merging always builds new instances.
    """

    model_config = ConfigDict(frozen=True)

    cluster_name: str = Field(min_length=1, description="Join key across sources")
    cred_resolver_id: str = Field(
        default="", description="Credential resolver id, empty when unset"
    )
    cluster_tags: dict[str, str] = Field(default_factory=dict)


class AggregatedClusterMetadata(ClusterMetaBaseModel):
    """One cluster merged across every source that reported it."""

    metadata: ClusterMetadata
    data_resolvers: list[str] = Field(
        min_length=1,
        description="Description of each contributing source, in merge order",
    )
    status: ClusterInformationStatus | None = Field(
        default=None,
        description="Unset only between merge and status resolution",
    )

    @property
    def cluster_name(self) -> str:
        return self.metadata.cluster_name
