# src/cv_store/config/settings.py
from typing import Optional
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from cv_store.config.settings import get_settings
        settings = get_settings()
        backend = settings.storage_backend
    """

    # Application Settings
    app_name: str = Field(
        default="cv-store",
        description="Application name"
    )

    # Storage Backend
    storage_backend: str = Field(
        default="local",
        description="Storage backend: local, s3 (direct bucket access) or presigned (via signing backend)"
    )

    # Local Storage Configuration
    local_db_path: str = Field(
        default="cv_store.db",
        description="SQLite database file used by the local backend"
    )

    # AWS Core Settings
    aws_region: Optional[str] = Field(
        default=None,
        description="Region of the S3 bucket"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        description="Custom S3 endpoint for the signing backend (e.g. a local S3 emulator)"
    )

    # S3 Configuration
    s3_bucket:Optional[str] = Field(
        default=None,
        description="S3 bucket holding the uploaded CVs"
    )

    s3_prefix: str = Field(
        default="cv-uploads/",
        description="Key prefix used by the signing backend for uploads and listings"
    )

    s3_public_base_url: Optional[str] = Field(
        default=None,
        description="Override for the bucket's public base URL (defaults to the virtual-hosted address)"
    )

    s3_list_prefix: str = Field(
        default="",
        description="Optional prefix for direct bucket listings"
    )

    s3_list_filter: str = Field(
        default="documents",
        description="Direct listing filter profile: documents, pdf or all"
    )

    s3_list_dedupe: bool = Field(
        default=True,
        description="Drop repeated keys from direct bucket listings"
    )

    s3_delete_enabled: bool = Field(
        default=True,
        description="Whether the bucket grants anonymous delete"
    )

    # Signing Backend Configuration
    api_base_url: str = Field(
        default="http://localhost:8787",
        description="Base URL of the signing backend"
    )

    allow_origin: str = Field(
        default="*",
        description="Origin allowed to call the signing backend"
    )

    port: int = Field(
        default=8787,
        description="Port the signing backend listens on"
    )

    presign_expires_seconds: int = Field(
        default=300,
        description="Validity window of issued signed URLs"
    )

    # HTTP Client
    http_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for outgoing HTTP requests"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator('storage_backend', mode='before')
    @classmethod
    def normalize_storage_backend(cls, v):
        """Normalize backend names; unknown names are left for the storage factory to handle."""
        if v:
            v = str(v).strip().lower()
            # Map alternative names to canonical ones
            backend_mapping = {
                "indexeddb": "local",
                "sqlite": "local",
                "direct": "s3",
                "signed": "presigned",
                "backend": "presigned",
            }
            return backend_mapping.get(v, v)
        return "local"

    @field_validator('s3_list_filter')
    @classmethod
    def validate_list_filter(cls, v):
        """Validate the listing filter is one of the allowed profiles."""
        valid_filters = ["documents", "pdf", "all"]
        v = v.lower()
        if v not in valid_filters:
            raise ValueError(f"Invalid s3_list_filter: {v}. Must be one of {valid_filters}")
        return v

    @field_validator('api_base_url')
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
