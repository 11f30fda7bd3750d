"""Enumerate the discovery sources enabled for one sync pass."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from clustermeta.config import Settings
from clustermeta.exceptions import SourceConfigurationError
from clustermeta.models import CredResolverConfig, InfraVendor
from clustermeta.observability import get_logger

from .aws import EksSource
from .azure import AksSource
from .base import DiscoverySource
from .inventory import InventorySource
from .kubeconfig import KubeconfigSource
from .tencent import TkeSource

logger = get_logger(__name__)

VENDOR_SOURCES: dict[InfraVendor, Callable[[CredResolverConfig], DiscoverySource]] = {
    InfraVendor.AWS: EksSource,
    InfraVendor.AZURE: AksSource,
    InfraVendor.TENCENT: TkeSource,
}


def build_sources(
    settings: Settings,
    cred_resolvers: Iterable[CredResolverConfig],
) -> list[DiscoverySource]:
    """Build the ordered source list.

    Order: inventory service (if enabled), kubeconfig files, then one vendor
    source per credential resolver. A source that cannot be built is logged
    and left out; it never aborts enumeration.
    """
    sources: list[DiscoverySource] = []

    if settings.inventory.enabled:
        if settings.inventory.address:
            sources.append(
                InventorySource(
                    settings.inventory.address,
                    timeout_seconds=settings.inventory.timeout_seconds,
                )
            )
        else:
            logger.warning("Inventory source enabled without an address, skipping")

    for path in settings.discovery.kubeconfig_paths:
        sources.append(KubeconfigSource(path))

    for cred_resolver in cred_resolvers:
        factory = VENDOR_SOURCES.get(cred_resolver.infra_vendor)
        if factory is None:
            logger.warning(
                "No discovery source for vendor, skipping",
                cred_resolver_id=cred_resolver.id,
                infra_vendor=cred_resolver.infra_vendor.value,
            )
            continue
        try:
            sources.append(factory(cred_resolver))
        except SourceConfigurationError as e:
            logger.warning(
                "Failed to build discovery source, skipping",
                cred_resolver_id=cred_resolver.id,
                error=str(e),
            )

    return sources
