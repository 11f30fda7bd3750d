"""Discovery source interface."""

from abc import ABC, abstractmethod

from clustermeta.models import ClusterMetadata


class DiscoverySource(ABC):
    """Lists the clusters known to one external system.

    Sources are registered into a plain list per sync pass. The only special
    case the engine knows about is ``authoritative``: clusters listed by an
    authoritative source (the local kubeconfig) count as registered.
    """

    authoritative: bool = False

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable identity recorded as provenance."""

    @abstractmethod
    async def list_clusters(self) -> list[ClusterMetadata]:
        """List clusters. Raising marks the whole source as unavailable."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.description!r})"
