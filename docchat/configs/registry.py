"""
Document registry configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Staleness window and reconciliation policy for the registry
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from docchat.configs.base import BaseSettings


class RegistrySettings(BaseSettings):
    """Registry sync policy."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="REGISTRY_",
        case_sensitive=False,
        extra="ignore",
    )

    sync_interval_seconds: float = Field(
        default=300.0,
        description="A non-forced resync is skipped if the last one is younger than this",
    )
    purge_orphans: bool = Field(
        default=True,
        description="Delete vectors whose document has no registry record during resync",
    )
