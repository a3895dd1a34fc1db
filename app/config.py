"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    azure_storage_connection_string: str | None = Field(
        default=None,
        description="Connection string for the Azure Storage account holding uploads",
    )
    azure_storage_container_name: str = Field(
        default="files",
        description="Blob container where uploaded files are written",
        min_length=3,
    )
    upload_prefix: str = Field(
        default="uploads",
        description="Virtual directory prepended to every stored blob path",
        min_length=1,
    )
    upload_path_layout: Literal["flat", "dated"] = Field(
        default="flat",
        description="Either ``flat`` (prefix/ts-name) or ``dated`` (prefix/y/m/d/ts-name)",
    )
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Largest accepted upload, in bytes",
        gt=0,
    )
    delete_verification_enabled: bool = Field(
        default=True,
        description="Poll the store after a delete until the blob is gone",
    )
    delete_verification_attempts: int = Field(
        default=3,
        description="Number of existence probes made after a delete",
        ge=1,
    )
    delete_verification_backoff_seconds: float = Field(
        default=0.5,
        description="Base delay multiplied by the attempt number between probes",
        ge=0,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used to decide which calendar day a file belongs to",
    )
    cors_allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to call the API from a browser",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    @field_validator("upload_prefix")
    @classmethod
    def _strip_prefix_slashes(cls, value: str) -> str:
        stripped = value.strip().strip("/")
        if not stripped:
            raise ValueError("UPLOAD_PREFIX must contain at least one path segment")
        return stripped

    @field_validator("azure_storage_connection_string")
    @classmethod
    def _blank_connection_string_is_missing(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    @property
    def storage_configured(self) -> bool:
        return self.azure_storage_connection_string is not None


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
