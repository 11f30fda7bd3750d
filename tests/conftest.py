"""Pytest configuration and shared fixtures."""

import asyncio
import copy
import os
from collections.abc import AsyncGenerator, Sequence
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment before importing settings
os.environ["ENV"] = "development"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_FORMAT"] = "text"

from clustermeta.config import DiscoverySettings  # noqa: E402
from clustermeta.exceptions import CredentialLookupError, PersistenceError  # noqa: E402
from clustermeta.models import ClusterMetadata  # noqa: E402
from clustermeta.persistence import StorageBackend  # noqa: E402
from clustermeta.repositories import (  # noqa: E402
    AggregatedMetadataRepository,
    CredResolverRepository,
)
from clustermeta.services import (  # noqa: E402
    AggregatedStore,
    ClusterMetadataService,
    CredentialLookupResult,
    CredResolverService,
)
from clustermeta.sources import DiscoverySource  # noqa: E402


class MemoryStorageBackend(StorageBackend):
    """In-memory storage backend for testing."""

    def __init__(self, document: list[dict[str, Any]] | None = None):
        self.document = document
        self.saves = 0
        self.fail_save = False

    def describe(self) -> str:
        return "memory"

    async def load(self) -> list[dict[str, Any]] | None:
        return copy.deepcopy(self.document)

    async def save(self, items: list[dict[str, Any]]) -> None:
        if self.fail_save:
            raise PersistenceError("disk full")
        self.document = copy.deepcopy(items)
        self.saves += 1


class FakeSource(DiscoverySource):
    """Discovery source returning canned records."""

    def __init__(
        self,
        name: str,
        records: Sequence[ClusterMetadata] = (),
        authoritative: bool = False,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.name = name
        self.records = list(records)
        self.authoritative = authoritative
        self.error = error
        self.delay = delay
        self.calls = 0

    @property
    def description(self) -> str:
        return self.name

    async def list_clusters(self) -> list[ClusterMetadata]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.records)


class FakeCredentials:
    """Credential health lookup with canned answers."""

    def __init__(
        self,
        healthy: dict[str, bool] | None = None,
        failing: set[str] | None = None,
    ):
        self.healthy = healthy or {}
        self.failing = failing or set()
        self.calls: list[str] = []

    def lookup(self, cred_resolver_id: str) -> CredentialLookupResult:
        self.calls.append(cred_resolver_id)
        if cred_resolver_id in self.failing:
            raise CredentialLookupError("credential store unavailable")
        if cred_resolver_id not in self.healthy:
            return CredentialLookupResult(found=False)
        return CredentialLookupResult(found=True, healthy=self.healthy[cred_resolver_id])


def cluster(name: str, cred: str = "", **tags: str) -> ClusterMetadata:
    return ClusterMetadata(cluster_name=name, cred_resolver_id=cred, cluster_tags=tags)


@pytest.fixture
def memory_backend() -> MemoryStorageBackend:
    return MemoryStorageBackend()


@pytest.fixture
def store(memory_backend) -> AggregatedStore:
    return AggregatedStore(AggregatedMetadataRepository(memory_backend))


@pytest.fixture
def credentials() -> FakeCredentials:
    return FakeCredentials(healthy={"cred1": True, "cred2": False})


@pytest.fixture
def discovery_settings() -> DiscoverySettings:
    return DiscoverySettings(source_timeout_seconds=0.5, max_concurrency=4, kubeconfig_paths=[])


@pytest.fixture
def cluster_service(store, credentials, discovery_settings) -> ClusterMetadataService:
    return ClusterMetadataService(store, credentials, discovery=discovery_settings)


@pytest_asyncio.fixture
async def cred_resolver_service() -> CredResolverService:
    service = CredResolverService(CredResolverRepository(MemoryStorageBackend()))
    await service.load()
    return service


@pytest_asyncio.fixture
async def test_client(
    store, cred_resolver_service, discovery_settings
) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with in-memory services."""
    from clustermeta.config import Settings
    from clustermeta.main import app

    app.state.settings = Settings(discovery=discovery_settings)
    app.state.cred_resolver_service = cred_resolver_service
    app.state.cluster_metadata_service = ClusterMetadataService(
        store, cred_resolver_service, discovery=discovery_settings
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
