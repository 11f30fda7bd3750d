"""Discovery sources."""

from .aws import EksSource
from .azure import AksSource
from .base import DiscoverySource
from .factory import VENDOR_SOURCES, build_sources
from .inventory import InventorySource
from .kubeconfig import KubeconfigSource
from .tencent import TkeSource

__all__ = [
    "AksSource",
    "DiscoverySource",
    "EksSource",
    "InventorySource",
    "KubeconfigSource",
    "TkeSource",
    "VENDOR_SOURCES",
    "build_sources",
]
