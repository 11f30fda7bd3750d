"""Local kubeconfig discovery source.

Every context in the kubeconfig is a locally registered cluster, so this is
the authoritative source for the provenance axis.
"""

import asyncio
from pathlib import Path

from kubernetes import config
from kubernetes.config.config_exception import ConfigException

from clustermeta.exceptions import SourceUnavailableError
from clustermeta.models import ClusterMetadata
from clustermeta.observability import get_logger

from .base import DiscoverySource

logger = get_logger(__name__)


class KubeconfigSource(DiscoverySource):
    """Clusters registered in one kubeconfig file (one per context name)."""

    authoritative = True

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()

    @property
    def description(self) -> str:
        return f"Kubeconfig:{self.path}"

    async def list_clusters(self) -> list[ClusterMetadata]:
        return await asyncio.to_thread(self._read_contexts)

    def _read_contexts(self) -> list[ClusterMetadata]:
        if not self.path.exists() or self.path.stat().st_size == 0:
            logger.debug("Kubeconfig not present", path=str(self.path))
            return []

        try:
            contexts, _ = config.list_kube_config_contexts(config_file=str(self.path))
        except ConfigException as e:
            raise SourceUnavailableError(self.description, str(e)) from e

        seen: set[str] = set()
        clusters = []
        for ctx in contexts or []:
            name = ctx.get("name")
            if not name or name in seen:
                continue
            seen.add(name)
            clusters.append(ClusterMetadata(cluster_name=name))
        return clusters
