"""Status resolution.

Classifies an aggregated record along two axes:
- provenance: registered (listed by the local kubeconfig) or suggestion
- credential health: whether the referenced credential resolver is usable

Lookup failures count as unhealthy, never as healthy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from clustermeta.exceptions import CredentialLookupError
from clustermeta.models import (
    AggregatedClusterMetadata,
    ClusterInformationStatus,
    CredentialHealth,
    Provenance,
)
from clustermeta.observability import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CredentialLookupResult:
    found: bool
    healthy: bool = False


class CredentialHealthLookup(Protocol):
    """Reports whether a credential resolver exists and is usable.

    Raises CredentialLookupError when the check itself fails.
    """

    def lookup(self, cred_resolver_id: str) -> CredentialLookupResult: ...


def resolve_credential_health(
    cred_resolver_id: str,
    credentials: CredentialHealthLookup,
) -> CredentialHealth:
    """Resolve the credential-health axis for one resolver id."""
    if not cred_resolver_id:
        return CredentialHealth.NO_CRED_RESOLVER

    try:
        result = credentials.lookup(cred_resolver_id)
    except CredentialLookupError as e:
        logger.warning(
            "Credential resolver lookup failed, treating as not ok",
            cred_resolver_id=cred_resolver_id,
            error=str(e),
        )
        return CredentialHealth.CRED_RESOLVER_NOTOK

    if not result.found:
        return CredentialHealth.NO_CRED_RESOLVER
    if result.healthy:
        return CredentialHealth.OK
    return CredentialHealth.CRED_RESOLVER_NOTOK


def resolve_status(
    aggregated: AggregatedClusterMetadata,
    is_locally_registered: bool,
    credentials: CredentialHealthLookup,
) -> ClusterInformationStatus:
    """Classify an aggregated record into one of the six statuses."""
    health = resolve_credential_health(aggregated.metadata.cred_resolver_id, credentials)
    provenance = Provenance.REGISTERED if is_locally_registered else Provenance.SUGGESTION
    return ClusterInformationStatus.combine(provenance, health)
