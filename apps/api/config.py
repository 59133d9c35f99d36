"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from packages.media.models import ValidationPolicy, normalize_extensions


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Recipe Media Service"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # File Storage
    storage_backend: Literal["local", "remote"] = "local"
    local_upload_path: str = "./uploads/recipes/images"

    # Remote object storage (GCS interoperability / S3-compatible)
    project_id: str | None = None
    bucket_name: str = ""
    credential_source: str | None = None  # Shared credentials profile name
    storage_access_key_id: str | None = None
    storage_secret_access_key: str | None = None
    storage_endpoint_url: str | None = "https://storage.googleapis.com"
    storage_public_host: str = "storage.googleapis.com"
    storage_region: str = "auto"
    public_prefix: str = "public"

    # Upload Limits
    allowed_extensions: list[str] = ["jpg", "jpeg", "png"]
    max_upload_size_bytes: int = 2 * 1024 * 1024
    upload_timeout_seconds: float | None = 30.0
    upload_folders: list[str] = ["recipes", "users"]

    @field_validator("allowed_extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        return sorted(normalize_extensions(value))

    def validation_policy(self) -> ValidationPolicy:
        """Build the upload validation policy from these settings."""
        return ValidationPolicy(
            allowed_extensions=frozenset(self.allowed_extensions),
            max_size_bytes=self.max_upload_size_bytes,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
