"""Shared data models for clustermeta.

All models follow these conventions:
- Field names: lowercase snake_case, serialized as camelCase
- Enums: uppercase SNAKE_CASE
"""

from .base import ClusterMetaBaseModel
from .cluster import (
    AggregatedClusterMetadata,
    ClusterInformationStatus,
    ClusterMetadata,
    CredentialHealth,
    Provenance,
)
from .credentials import (
    CredentialResolverKind,
    CredResolverConfig,
    CredResolverStatus,
    InfraVendor,
)

__all__ = [
    # Base
    "ClusterMetaBaseModel",
    # Cluster domain
    "AggregatedClusterMetadata",
    "ClusterInformationStatus",
    "ClusterMetadata",
    "CredentialHealth",
    "Provenance",
    # Credential resolvers
    "CredentialResolverKind",
    "CredResolverConfig",
    "CredResolverStatus",
    "InfraVendor",
]
