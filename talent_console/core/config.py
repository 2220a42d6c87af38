"""
Talent Console - Configuration
Settings management for the authentication and account-lifecycle core.
"""

import json
import logging
from functools import lru_cache
from typing import List, Optional, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings.
    All configuration comes from environment variables or a local .env file.
    """

    # ===========================================
    # APPLICATION SETTINGS
    # ===========================================
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    APP_NAME: str = "talent-console"
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # DATABASE CONFIGURATION
    # ===========================================
    DATABASE_URL: str = "sqlite:///./talent_console.db"
    DATABASE_ECHO: bool = False

    # ===========================================
    # IDENTITY PROVIDER (SUPABASE)
    # ===========================================
    SUPABASE_URL: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # ===========================================
    # BOOTSTRAP ADMIN
    # ===========================================
    BOOTSTRAP_ADMIN_EMAIL: str = "admin@example.com"
    BOOTSTRAP_ADMIN_PASSWORD: str = "admin123"
    BOOTSTRAP_ADMIN_NAME: str = "Admin User"

    # ===========================================
    # PASSWORDS
    # ===========================================
    PASSWORD_HASH_SCHEMES: List[str] = ["bcrypt"]
    BCRYPT_ROUNDS: int = 10
    REHASH_LEGACY_ON_LOGIN: bool = False
    RESET_REQUIRES_ACTIVE_ACCOUNT: bool = False

    # ===========================================
    # RECRUITER PROVISIONING
    # ===========================================
    PROVISIONING_RECOVERY_AFTER_SECONDS: int = 300

    # ===========================================
    # SESSION PERSISTENCE
    # ===========================================
    SESSION_SLOT_NAME: str = "admin_user"
    SESSION_FILE_PATH: Optional[str] = None
    SESSION_SIGNING_KEY: Optional[str] = None
    SESSION_SIGNING_ALGORITHM: str = "HS256"
    SESSION_TIMEOUT_MINUTES: int = 480

    @field_validator("PASSWORD_HASH_SCHEMES", mode="before")
    @classmethod
    def assemble_hash_schemes(cls, v):
        if isinstance(v, str):
            if v.startswith("["):
                return json.loads(v)
            return [scheme.strip() for scheme in v.split(",") if scheme.strip()]
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def identity_provider_configured(self) -> bool:
        """Whether the Supabase admin API credentials are present."""
        return bool(self.SUPABASE_URL and self.SUPABASE_SERVICE_ROLE_KEY)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Apply the configured log level to the root logger.

    Args:
        settings: Settings to read LOG_LEVEL from (defaults to cached settings)
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
