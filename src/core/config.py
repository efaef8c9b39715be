"""Application configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Remote document store. Unset runs a local-only session with no mirror.
    database_url: str | None = None

    # Link preview API (linkpreview.net compatible: ?key=...&q=...)
    preview_api_url: str = Field(
        default="https://api.linkpreview.net/",
        validation_alias="PREVIEW_API_URL",
    )
    preview_api_key: str = Field(default="", validation_alias="PREVIEW_API_KEY")
    preview_timeout: float = Field(default=10.0, validation_alias="PREVIEW_TIMEOUT")

    # Blob storage for uploaded images, served under {public_base_url}/storage
    blob_storage_dir: str = Field(default="storage", validation_alias="BLOB_STORAGE_DIR")
    public_base_url: str = Field(
        default="http://localhost:8000",
        validation_alias="PUBLIC_BASE_URL",
    )

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        validation_alias="CORS_ORIGINS",
    )

    # Field length limits
    max_title_length: int = Field(default=500, validation_alias="MAX_TITLE_LENGTH")
    max_description_length: int = Field(
        default=2000, validation_alias="MAX_DESCRIPTION_LENGTH",
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @field_validator("database_url")
    @classmethod
    def empty_database_url_is_unset(cls, v: str | None) -> str | None:
        """Treat DATABASE_URL= (empty) the same as not configured."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def blob_public_url(self) -> str:
        """Base URL that blob keys are appended to."""
        return f"{self.public_base_url.rstrip('/')}/storage"

    @property
    def remote_enabled(self) -> bool:
        """Whether a remote document store is configured."""
        return self.database_url is not None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
