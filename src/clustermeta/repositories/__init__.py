"""Typed repositories over storage backends."""

from .cred_resolver_repository import CredResolverRepository
from .metadata_repository import AggregatedMetadataRepository

__all__ = [
    "AggregatedMetadataRepository",
    "CredResolverRepository",
]
