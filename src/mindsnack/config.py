from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MINDSNACK_", env_file=".env", extra="ignore", populate_by_name=True
    )

    app_name: str = "mindsnack"
    env: str = "dev"
    host: str = "0.0.0.0"  # nosec B104 - intentional for container deployments
    port: int = 8080
    log_level: str = "INFO"

    # Upstream articles/categories/editor-notes API (system of record)
    articles_api_url: str = Field(
        default="https://snackmachine.onrender.com/api",
        validation_alias="ARTICLES_API_URL",
    )
    upstream_timeout: float = Field(default=30.0, validation_alias="UPSTREAM_TIMEOUT")

    # Shared secret for POST /cache/revalidate
    revalidate_secret: str = Field(
        default="your-secret-token-here",
        validation_alias="REVALIDATE_SECRET",
    )

    # In-process response cache
    cache_ttl_seconds: float = Field(default=86400, validation_alias="CACHE_TTL_SECONDS")
    cache_sweep_threshold: int = Field(default=100, validation_alias="CACHE_SWEEP_THRESHOLD")

    # Cache-Control advertised on /cached/* responses
    cache_shared_max_age: int = Field(default=86400, validation_alias="CACHE_SHARED_MAX_AGE")
    cache_stale_while_revalidate: int = Field(
        default=86400, validation_alias="CACHE_STALE_WHILE_REVALIDATE"
    )

    # External page cache (rendered pages). None = log targets only.
    page_revalidate_url: str | None = Field(default=None, validation_alias="PAGE_REVALIDATE_URL")
    page_revalidate_token: str | None = Field(
        default=None, validation_alias="PAGE_REVALIDATE_TOKEN"
    )

    # Image upload provider
    cloudinary_cloud_name: str | None = Field(default=None, validation_alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: str | None = Field(default=None, validation_alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: str | None = Field(
        default=None, validation_alias="CLOUDINARY_API_SECRET"
    )

    # Security Headers
    enable_security_headers: bool = True
    csp_policy: str | None = None


settings = Settings()
