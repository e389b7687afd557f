"""Application configuration using pydantic-settings.

All environment variables should be accessed through the settings object
rather than using os.getenv() directly.
"""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database - SQLite for local dev, PostgreSQL in production
    database_url: str = "sqlite:///./tailorshop.db"

    # Security
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 240  # 4 hours

    # CORS - comma-separated origins or "*" for development only
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # ==========================================================================
    # Notification channels (mock/log mode when left empty)
    # ==========================================================================
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    email_from: str = ""

    sms_provider: Literal["twilio", "local"] = "local"
    sms_api_key: Optional[str] = None
    sms_api_secret: Optional[str] = None
    sms_from_number: Optional[str] = None

    # Shop
    shop_name: str = "Tailor Shop"
    default_low_stock_threshold: float = 10

    # Server
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # Rate limiting
    rate_limit_enabled: bool = True

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Refuse insecure secrets outside debug mode."""
        import warnings

        if self.secret_key == "change-me-in-production" or len(self.secret_key) < 32:
            if not self.debug:
                raise ValueError(
                    "FATAL: SECRET_KEY must be set to a value of at least 32 characters "
                    "when DEBUG is false."
                )
            warnings.warn(
                "Using a default or short SECRET_KEY. Set SECRET_KEY for production.",
                UserWarning,
                stacklevel=2,
            )
        return self

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
