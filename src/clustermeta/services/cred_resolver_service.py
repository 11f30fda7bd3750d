"""Credential resolver service.

Owns the locally configured credential resolvers and answers credential
health lookups for status resolution.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from types import MappingProxyType

from clustermeta.exceptions import CredentialLookupError
from clustermeta.models import CredResolverConfig
from clustermeta.observability import get_logger
from clustermeta.repositories import CredResolverRepository

from .status_resolver import CredentialLookupResult

logger = get_logger(__name__)


class CredResolverService:
    """CRUD over credential resolver configs plus health lookup."""

    def __init__(self, repository: CredResolverRepository):
        self.repository = repository
        self._configs: Mapping[str, CredResolverConfig] | None = None
        self._write_lock = asyncio.Lock()

    async def load(self) -> None:
        """Load the stored configs."""
        configs = await self.repository.load()
        self._configs = MappingProxyType({c.id: c for c in configs})
        logger.info("Loaded credential resolvers", count=len(configs))

    def _loaded(self) -> Mapping[str, CredResolverConfig]:
        if self._configs is None:
            raise RuntimeError("Credential resolvers not loaded. Call load() first.")
        return self._configs

    def list_cred_resolvers(self) -> list[CredResolverConfig]:
        return [c.model_copy(deep=True) for c in self._loaded().values()]

    def get_cred_resolver(self, cred_resolver_id: str) -> CredResolverConfig | None:
        if not cred_resolver_id:
            raise ValueError("cred_resolver_id should not be empty")
        config = self._loaded().get(cred_resolver_id)
        return config.model_copy(deep=True) if config is not None else None

    async def set_cred_resolver(self, config: CredResolverConfig) -> None:
        """Create or replace a config and persist all configs."""
        async with self._write_lock:
            configs = dict(self._loaded())
            configs[config.id] = config.model_copy(deep=True)
            await self.repository.save(list(configs.values()))
            self._configs = MappingProxyType(configs)
        logger.info("Credential resolver saved", cred_resolver_id=config.id)

    async def delete_cred_resolver(self, cred_resolver_id: str) -> bool:
        """Delete a config.

        Returns:
            True if deleted, False if not found
        """
        async with self._write_lock:
            configs = dict(self._loaded())
            if configs.pop(cred_resolver_id, None) is None:
                return False
            await self.repository.save(list(configs.values()))
            self._configs = MappingProxyType(configs)
        logger.info("Credential resolver deleted", cred_resolver_id=cred_resolver_id)
        return True

    def lookup(self, cred_resolver_id: str) -> CredentialLookupResult:
        """Report whether a resolver exists and is registered ok."""
        try:
            config = self.get_cred_resolver(cred_resolver_id)
        except (RuntimeError, ValueError) as e:
            raise CredentialLookupError(str(e)) from e
        if config is None:
            return CredentialLookupResult(found=False)
        return CredentialLookupResult(found=True, healthy=config.is_healthy)
