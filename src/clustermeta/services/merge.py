"""Merge engine.

Folds the records of every discovery source into one aggregated record per
cluster name. Sources are folded in registration order, so the result only
depends on that order and never on which source answered first.

Field rules when a name is seen again:
- cred_resolver_id: the incoming value wins only if it is non-empty
- cluster_tags: union by key, the later source wins on collision
- cluster_name: never changes (it is the join key)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from clustermeta.models import AggregatedClusterMetadata, ClusterMetadata
from clustermeta.observability import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SourceResult:
    """What one source contributed to a sync pass."""

    description: str
    records: Sequence[ClusterMetadata] = ()
    authoritative: bool = False
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class MergeOutcome:
    """Aggregated records keyed by cluster name plus the registered names."""

    aggregated: dict[str, AggregatedClusterMetadata] = field(default_factory=dict)
    registered: set[str] = field(default_factory=set)


def merge_metadata(a: ClusterMetadata, b: ClusterMetadata) -> ClusterMetadata:
    """Merge b into a, returning a new record."""
    return ClusterMetadata(
        cluster_name=a.cluster_name,
        cred_resolver_id=b.cred_resolver_id or a.cred_resolver_id,
        cluster_tags={**a.cluster_tags, **b.cluster_tags},
    )


class MergeEngine:
    """Folds source results into aggregated records."""

    def merge(
        self,
        results: Sequence[SourceResult],
        outcome: MergeOutcome | None = None,
    ) -> MergeOutcome:
        """Fold results, in order, into outcome (a fresh one by default).

        Passing the outcome of a previous call folds further sources on top
        of it, which is equivalent to merging all of them in one call.
        """
        outcome = outcome if outcome is not None else MergeOutcome()

        for result in results:
            if result.failed:
                logger.warning(
                    "Skipping failed source",
                    source=result.description,
                    error=result.error,
                )
                continue

            logger.info(
                "Source resolved clusters",
                source=result.description,
                count=len(result.records),
            )

            for record in result.records:
                self._fold(outcome, result, record)

        return outcome

    def _fold(
        self,
        outcome: MergeOutcome,
        result: SourceResult,
        record: ClusterMetadata,
    ) -> None:
        name = record.cluster_name
        existing = outcome.aggregated.get(name)

        if existing is None:
            # Copy so later merges never alias the source's tag mapping
            outcome.aggregated[name] = AggregatedClusterMetadata(
                metadata=record.model_copy(
                    update={"cluster_tags": dict(record.cluster_tags)}
                ),
                data_resolvers=[result.description],
            )
        else:
            existing.metadata = merge_metadata(existing.metadata, record)
            existing.data_resolvers.append(result.description)

        if result.authoritative:
            outcome.registered.add(name)
