"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. CDN provider settings are not validated here: the
storage factory checks them and falls back to local storage instead of
failing the process.
"""

from functools import lru_cache

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env."""

    # App
    app_name: str = "coursestore"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database (course records); empty disables course lookup
    database_url: str = ""
    database_echo: bool = False

    # Storage selector: local | cdn-s3-style | cdn-distribution-style
    storage_provider: str = "local"

    # Local filesystem
    uploads_dir: str = "./uploads/courses"
    public_domain: str | None = None
    uploads_url_path: str = "/uploads/courses"

    # Object store with edge CDN (Cloudflare R2 + zone)
    cloudflare_account_id: str | None = None
    cloudflare_r2_access_key_id: str | None = None
    cloudflare_r2_secret_access_key: SecretStr | None = None
    cloudflare_r2_bucket_name: str | None = None
    cloudflare_r2_cdn_domain: str | None = None
    cloudflare_zone_id: str | None = None
    cloudflare_api_token: SecretStr | None = None
    cloudflare_api_base_url: str = "https://api.cloudflare.com/client/v4"

    # Object store with separate distribution (S3 + CloudFront)
    aws_region: str | None = None
    aws_access_key_id: str | None = None
    aws_secret_access_key: SecretStr | None = None
    aws_s3_bucket_name: str | None = None
    aws_cloudfront_domain: str | None = None
    aws_cloudfront_distribution_id: str | None = None

    cdn_purge_timeout_seconds: float = 30.0

    # Admin endpoints: when set, X-Admin-Key must match
    admin_api_key: SecretStr | None = None

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("storage_provider")
    @classmethod
    def normalize_storage_provider(cls, value: str) -> str:
        """Lower-case and trim the provider selector."""
        return value.strip().lower()


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    In tests, call get_settings.cache_clear() after overriding env vars so
    the next get_settings() uses the new values.
    """
    return Settings()
