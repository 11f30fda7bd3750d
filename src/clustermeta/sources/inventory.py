"""Internal inventory service discovery source."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from clustermeta.exceptions import SourceUnavailableError
from clustermeta.models import ClusterMetadata
from clustermeta.observability import get_logger

from .base import DiscoverySource

logger = get_logger(__name__)


class InventorySource(DiscoverySource):
    """Clusters listed by the inventory service's cluster API."""

    def __init__(
        self,
        address: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = address.rstrip("/")
        self.timeout = httpx.Timeout(timeout_seconds, connect=5.0)
        self._transport = transport

    @property
    def description(self) -> str:
        return f"Inventory:{self.base_url}"

    async def list_clusters(self) -> list[ClusterMetadata]:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            response = await client.get("/api/v1/clusters")

        if not response.is_success:
            raise SourceUnavailableError(
                self.description,
                f"unexpected status code {response.status_code}",
            )

        payload = response.json()
        items: list[dict[str, Any]] = (
            payload.get("items", []) if isinstance(payload, dict) else payload
        )

        clusters = []
        for item in items:
            try:
                clusters.append(ClusterMetadata.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    "Skipping malformed inventory item",
                    source=self.description,
                    error=str(e),
                )
        return clusters
