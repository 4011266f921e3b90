"""Application settings using pydantic-settings."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from storehouse_core.constants import DEFAULT_BUCKET


class Settings(BaseSettings):
    """Central configuration for storehouse-cache."""

    model_config = SettingsConfigDict(env_prefix="STOREHOUSE_", env_file=".env")

    # --- Store ---
    store_backend: Literal["redis", "memory"] = Field(
        default="redis",
        description="Store client: 'redis' for a server, 'memory' for in-process",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    bucket: str = Field(
        default=DEFAULT_BUCKET,
        description="Bucket holding page cache records",
    )

    # --- Cache ---
    default_ttl_seconds: int = Field(
        default=86400,
        description="TTL applied by the page cache when none is given",
    )

    # --- Logging ---
    log_level: str = Field(
        default="INFO",
        description="Root log level",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log renderer",
    )

    @field_validator("default_ttl_seconds")
    @classmethod
    def validate_ttl(cls, value: int) -> int:
        """TTL must be positive."""
        if value <= 0:
            msg = "default_ttl_seconds must be positive"
            raise ValueError(msg)
        return value

    def connection_spec(self) -> dict[str, Any]:
        """Return the spec mapping handed to IndexedConnection."""
        spec: dict[str, Any] = {"bucket": self.bucket, "backend": self.store_backend}
        if self.store_backend == "redis":
            spec["url"] = self.redis_url
        return spec
