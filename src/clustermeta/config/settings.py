"""Configuration management with Pydantic Settings.

Environment variables are loaded from:
1. Environment variables (highest priority)
2. .env file (development)
3. Defaults (lowest priority)
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Logging format."""

    JSON = "json"
    TEXT = "text"


class StorageBackendType(str, Enum):
    """Where snapshots and credential resolver configs are persisted."""

    FILE = "file"
    REDIS = "redis"


class StorageSettings(BaseSettings):
    """Persistence configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    backend: StorageBackendType = Field(
        default=StorageBackendType.FILE,
        description="Persistence backend (file or redis)",
    )
    directory: Path = Field(
        default=Path("~/.kubeconfig-updater"),
        description="Directory holding the JSON documents for the file backend",
    )
    metadata_file: str = Field(
        default="aggregated_cluster_metadata.json",
        description="File name of the aggregated cluster snapshot",
    )
    cred_resolver_file: str = Field(
        default="cred_resolver_configs.json",
        description="File name of the credential resolver configs",
    )
    metadata_key: str = Field(
        default="clustermeta:aggregated",
        description="Redis key of the aggregated cluster snapshot",
    )
    cred_resolver_key: str = Field(
        default="clustermeta:cred-resolvers",
        description="Redis key of the credential resolver configs",
    )

    @property
    def metadata_path(self) -> Path:
        return self.directory.expanduser() / self.metadata_file

    @property
    def cred_resolver_path(self) -> Path:
        return self.directory.expanduser() / self.cred_resolver_file


class RedisSettings(BaseSettings):
    """Redis configuration."""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    host: str = Field(default="localhost", description="Redis host")
    port: int = Field(default=6379, description="Redis port")
    password: str | None = Field(default=None, description="Redis password")

    @property
    def url(self) -> str:
        """Build Redis URL."""
        if self.password:
            return f"redis://:{self.password}@{self.host}:{self.port}"
        return f"redis://{self.host}:{self.port}"


class InventorySettings(BaseSettings):
    """Internal inventory service used as an extra discovery source."""

    model_config = SettingsConfigDict(env_prefix="INVENTORY_")

    enabled: bool = Field(default=False, description="Query the inventory service on sync")
    address: str = Field(default="", description="Inventory service base URL")
    timeout_seconds: float = Field(default=10.0, description="HTTP timeout")


class DiscoverySettings(BaseSettings):
    """Discovery pass tuning."""

    model_config = SettingsConfigDict(env_prefix="DISCOVERY_")

    source_timeout_seconds: float = Field(
        default=60.0,
        description="Upper bound for a single source's list call",
    )
    max_concurrency: int = Field(
        default=8,
        description="Max sources queried at the same time",
    )
    kubeconfig_paths: list[Path] = Field(
        default_factory=lambda: [Path("~/.kube/config")],
        description="Kubeconfig files treated as locally registered clusters",
    )

    @field_validator("max_concurrency")
    @classmethod
    def validate_max_concurrency(cls, v: int) -> int:
        """Ensure at least one source can run."""
        return max(1, v)


class Settings(BaseSettings):
    """Main application settings.

    All settings can be overridden via environment variables.
    For nested settings, use the appropriate prefix (e.g., STORAGE_BACKEND).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="clustermeta", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        alias="ENV",
        description="Deployment environment",
    )

    # Logging configuration
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_format: LogFormat = Field(default=LogFormat.TEXT, description="Logging format")

    debug: bool = Field(default=False, description="Enable debug mode")

    # Nested settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    inventory: InventorySettings = Field(default_factory=InventorySettings)
    discovery: DiscoverySettings = Field(default_factory=DiscoverySettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses LRU cache to avoid re-parsing environment variables.
    """
    return Settings()
