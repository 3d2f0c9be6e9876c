"""Application configuration using pydantic-settings."""
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "pos-backoffice-api"
    database_url: str = Field(
        ...,
        validation_alias=AliasChoices("DATABASE_URL", "database_url")
    )
    log_level: str = "INFO"

    # Admin endpoints (X-Admin-Key header); empty = open (dev mode)
    admin_api_key: Optional[str] = Field(None, validation_alias="ADMIN_API_KEY")

    # Legacy import
    import_path: str = Field("imports", validation_alias="IMPORT_PATH")
    legacy_dbf_encoding: str = Field("latin1", validation_alias="LEGACY_DBF_ENCODING")
    legacy_staging_batch_size: int = Field(500, validation_alias="LEGACY_STAGING_BATCH_SIZE")
    legacy_import_worker_enabled: bool = Field(True, validation_alias="LEGACY_IMPORT_WORKER_ENABLED")
    legacy_import_max_files: int = Field(100, validation_alias="LEGACY_IMPORT_MAX_FILES")
    legacy_import_max_file_size: int = Field(
        200 * 1024 * 1024, validation_alias="LEGACY_IMPORT_MAX_FILE_SIZE"
    )

    @field_validator("database_url")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Normalize DATABASE_URL to the psycopg driver for PostgreSQL."""
        if v.startswith("sqlite"):
            return v

        if v.startswith("postgres://"):
            v = v.replace("postgres://", "postgresql+psycopg://", 1)

        if v.startswith("postgresql://"):
            v = v.replace("postgresql://", "postgresql+psycopg://", 1)

        if not v.startswith("postgresql+psycopg://"):
            raise ValueError("DATABASE_URL must start with postgresql://, postgresql+psycopg://, or sqlite")

        return v

    @field_validator("legacy_staging_batch_size")
    @classmethod
    def positive_batch_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("LEGACY_STAGING_BATCH_SIZE must be at least 1")
        return v


settings = Settings()
