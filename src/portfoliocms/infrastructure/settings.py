"""Application settings using Pydantic Settings for configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Portfolio CMS"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # PostgreSQL (document store)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: SecretStr = Field(default=SecretStr("postgres"))
    postgres_db: str = "portfolio"
    postgres_pool_min_size: int = 1
    postgres_pool_max_size: int = 10

    # S3-compatible blob store
    s3_endpoint: str | None = None
    s3_region: str = "us-east-1"
    s3_access_key: SecretStr | None = None
    s3_secret_key: SecretStr | None = None
    s3_bucket: str = "portfolio-assets"
    s3_force_path_style: bool = True
    s3_public_base_url: str | None = None
    s3_connect_timeout_seconds: float = 10.0
    s3_read_timeout_seconds: float = 60.0
    s3_multipart_chunk_mb: int = 8

    # Attachment folders (<root>/<subfolder>)
    blob_root_folder: str = "portfolio"
    thumbnail_folder: str = "thumbnails"
    company_logo_folder: str = "company_logos"
    certificate_logo_folder: str = "certificate_logos"

    # "any": media type OR extension must match; "all": both
    attachment_match_policy: Literal["any", "all"] = "any"

    @computed_field
    @property
    def postgres_dsn(self) -> str:
        """Construct PostgreSQL connection string."""
        password = self.postgres_password.get_secret_value()
        return f"postgresql://{self.postgres_user}:{password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    @computed_field
    @property
    def blob_public_base_url(self) -> str:
        """Base URL under which uploaded objects are publicly reachable."""
        if self.s3_public_base_url:
            return self.s3_public_base_url.rstrip("/")
        if self.s3_endpoint:
            return f"{self.s3_endpoint.rstrip('/')}/{self.s3_bucket}"
        return f"https://{self.s3_bucket}.s3.{self.s3_region}.amazonaws.com"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
