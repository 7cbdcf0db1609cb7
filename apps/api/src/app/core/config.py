"""
Application Configuration

Settings are loaded from environment variables (and an optional .env file)
using pydantic-settings. Use the module-level ``settings`` instance or the
cached ``get_settings()`` accessor.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> list[str]:
    """Split a comma-separated setting into a list of trimmed, non-empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Unify API settings - all configurable via environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "Unify API"
    python_env: str = "development"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./unify.db"
    db_echo: bool = False

    # Rate limiting (off unless enabled; Redis-backed when connected)
    rate_limit_enabled: bool = False
    redis_url: str = "redis://localhost:6379/0"

    # CORS
    cors_origins: str = "*"

    # Identity
    # The identity provider issues and verifies tokens upstream. Signature
    # verification here is opt-in.
    jwt_verify_signature: bool = False
    jwt_secret_key: str | None = None
    jwt_algorithm: str = "HS256"
    jwt_audience: str | None = None
    admin_groups: str = "admin,Admins"

    # Membership reconciliation job
    membership_reconcile_enabled: bool = True
    membership_reconcile_interval_minutes: int = 60

    # Email notifications
    resend_api_key: str | None = None
    email_from: str = "Unify <noreply@unify.dev>"
    frontend_url: str = "http://localhost:5173"

    @property
    def is_development(self) -> bool:
        return self.python_env.lower() == "development"

    @property
    def is_production(self) -> bool:
        return self.python_env.lower() == "production"

    @property
    def cors_origins_list(self) -> list[str]:
        return _split_csv(self.cors_origins) or ["*"]

    @property
    def admin_groups_list(self) -> list[str]:
        return _split_csv(self.admin_groups)

    @property
    def async_database_url(self) -> str:
        """Database URL with an async driver."""
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()


settings = get_settings()
