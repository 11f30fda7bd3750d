"""Business logic services."""

from .aggregated_store import AggregatedStore
from .cluster_metadata_service import ClusterMetadataService
from .cred_resolver_service import CredResolverService
from .merge import MergeEngine, MergeOutcome, SourceResult, merge_metadata
from .status_resolver import (
    CredentialHealthLookup,
    CredentialLookupResult,
    resolve_credential_health,
    resolve_status,
)

__all__ = [
    "AggregatedStore",
    "ClusterMetadataService",
    "CredResolverService",
    "CredentialHealthLookup",
    "CredentialLookupResult",
    "MergeEngine",
    "MergeOutcome",
    "SourceResult",
    "merge_metadata",
    "resolve_credential_health",
    "resolve_status",
]
