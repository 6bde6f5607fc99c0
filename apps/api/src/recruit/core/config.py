"""
Application Configuration

Settings are loaded from environment variables (and an optional .env file)
using pydantic-settings. Use `settings` for module-level access or
`get_settings()` where a fresh dependency is preferable.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the recruitment API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    python_env: str = "development"
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Routing - every application route is served under both prefixes
    api_prefix: str = "/api/v1"
    legacy_api_prefix: str = "/server"

    # Key-value store
    redis_url: str = "redis://localhost:6379/0"
    store_backend: str = Field(default="redis", description="redis | memory")
    store_namespace: str = "application:"

    # Admin gate (single shared token)
    admin_token: str | None = None

    # Bot-prevention challenge (Cloudflare Turnstile)
    turnstile_secret: str | None = None
    turnstile_verify_url: str = "https://challenges.cloudflare.com/turnstile/v0/siteverify"
    turnstile_timeout_seconds: float = 10.0

    # At-rest encryption of form data
    encryption_key: str = "default-insecure-key"

    # Notification email (Resend)
    resend_api_key: str | None = None
    email_from: str = "Likelion Dankook <onboarding@resend.dev>"
    admin_email: str = "likelion.dku@gmail.com"

    # Submission rate limiting
    rate_limit_max: int = 20
    rate_limit_window_seconds: int = 60

    @property
    def is_development(self) -> bool:
        return self.python_env.lower() == "development"

    @property
    def is_production(self) -> bool:
        return self.python_env.lower() == "production"

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()


settings = get_settings()
