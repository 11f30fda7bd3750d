"""Credential resolver models.

A credential resolver describes how to obtain short-lived cloud credentials
for one vendor account. Clusters reference resolvers by id.
"""

from enum import Enum

from pydantic import Field, field_validator

from .base import ClusterMetaBaseModel


class InfraVendor(str, Enum):
    """Cloud vendor owning an account."""

    AWS = "AWS"
    AZURE = "AZURE"
    TENCENT = "TENCENT"


class CredentialResolverKind(str, Enum):
    """How credentials are obtained."""

    DEFAULT = "DEFAULT"  # Vendor default chain
    ENV = "ENV"  # Environment variables
    IMDS = "IMDS"  # Instance metadata / managed identity
    PROFILE = "PROFILE"  # Named profile, see resolver_attributes["profile"]


class CredResolverStatus(str, Enum):
    """Registration health of a credential resolver."""

    CRED_REGISTERED_OK = "CRED_REGISTERED_OK"
    CRED_REGISTERED_NOT_OK = "CRED_REGISTERED_NOT_OK"
    CRED_SUGGESTION_OK = "CRED_SUGGESTION_OK"


class CredResolverConfig(ClusterMetaBaseModel):
    """Stored credential resolver configuration."""

    account_id: str = Field(min_length=1, description="Resolver id (vendor account id)")
    infra_vendor: InfraVendor
    kind: CredentialResolverKind = CredentialResolverKind.DEFAULT
    status: CredResolverStatus = CredResolverStatus.CRED_REGISTERED_OK
    account_alias: str = ""
    resolver_attributes: dict[str, str] = Field(default_factory=dict)

    @field_validator("infra_vendor", mode="before")
    @classmethod
    def normalize_vendor(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def id(self) -> str:
        return self.account_id

    @property
    def is_healthy(self) -> bool:
        return self.status == CredResolverStatus.CRED_REGISTERED_OK
