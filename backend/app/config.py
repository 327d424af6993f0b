"""
Userdesk Configuration Module
Loads settings from environment variables with sensible defaults.
"""

from functools import lru_cache
from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Userdesk"
    debug: bool = False

    # Authentication
    secret_key: str = Field(..., min_length=32)  # Required, no default
    access_token_expire_minutes: int = 60  # 1 hour, never refreshed
    jwt_algorithm: str = "HS256"
    bcrypt_rounds: int = 12

    # Rate Limiting
    rate_limit_enabled: bool = True
    rate_limit_login: str = "5/15minutes"  # Login attempts
    rate_limit_register: str = "10/hour"  # Self-registration

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Database
    database_url: str = Field(..., alias="DATABASE_URL")

    # Listing
    default_page_size: int = 10
    max_page_size: int = 100

    # Seeding
    seed_default_users: bool = False

    # Logging
    log_dir: str = "/var/log/userdesk"
    log_level: str = "INFO"

    # API Settings
    api_prefix: str = "/api"

    @field_validator('secret_key')
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Validate that the secret key is secure."""
        if not v or len(v) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters long")

        # Check for common insecure values
        insecure_values = [
            "change-me-in-production",
            "secret",
            "password",
            "changeme",
            "default",
        ]
        if any(bad in v.lower() for bad in insecure_values):
            raise ValueError(
                "SECRET_KEY appears to be insecure. Generate a secure key with: "
                "python -c 'import secrets; print(secrets.token_hex(32))'"
            )

        return v

    @field_validator('max_page_size', 'default_page_size')
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Page sizes must be positive")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    try:
        return Settings()
    except Exception as e:
        print(f"❌ Configuration Error: {e}")
        raise


# Convenience alias
settings = get_settings()
