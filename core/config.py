"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Chirpy happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. jwt_secret -> JWT_SECRET). Type coercion and validation are built in.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved. PLATFORM=dev generates a throwaway JWT_SECRET with a
      warning; any other platform refuses to start without one.

Security notes:
  [M6] JWT_SECRET shorter than 32 chars is rejected outright. HS256 signing
       relies on key entropy -- a short key weakens every access token.

  [M7] Outside PLATFORM=dev a missing JWT_SECRET is a hard startup failure.
       A random key would silently invalidate every session on restart.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or chirps/.
"""

import logging
import secrets
from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("chirpy.config")

DEV_PLATFORM = "dev"

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# The database and .env live in the project root; /app serves only static/.
_DEFAULT_DB_URL = f"sqlite:///{PROJECT_ROOT / 'chirpy.db'}"
_DEFAULT_STATIC_DIR = str(PROJECT_ROOT / "static")


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file (provided PLATFORM=dev or a
    JWT_SECRET is set).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Deployment
    # ------------------------------------------------------------------

    # Deployment-mode flag. Only "dev" unlocks POST /admin/reset.
    platform: str = "production"
    db_url: str = _DEFAULT_DB_URL
    static_dir: str = _DEFAULT_STATIC_DIR

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    jwt_secret: str = ""
    polka_key: str = ""
    api_key_header: str = "Authorization"

    access_token_ttl_seconds: int = Field(default=3600, gt=0)
    refresh_token_ttl_days: int = Field(default=60, gt=0)
    # Clock-skew grace for access-token expiry. Zero means strict expiry.
    token_leeway_seconds: int = Field(default=0, ge=0)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def is_development(self) -> bool:
        return self.platform == DEV_PLATFORM

    @property
    def access_token_ttl(self) -> timedelta:
        return timedelta(seconds=self.access_token_ttl_seconds)

    @property
    def refresh_token_ttl(self) -> timedelta:
        return timedelta(days=self.refresh_token_ttl_days)

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_jwt_secret(self) -> "Settings":
        """Enforce the JWT_SECRET policy [M7].

        Dev platform: auto-generate a random key with a warning. Tokens will
            not survive a restart -- acceptable for local development.

        Any other platform: refuse to start if JWT_SECRET is missing.

        Both: reject keys shorter than 32 characters [M6].
        """
        if not self.jwt_secret:
            if self.is_development:
                self.jwt_secret = secrets.token_hex(32)
                logger.warning("Using auto-generated JWT_SECRET. Tokens will not persist across restarts.")
            else:
                raise ValueError(
                    "JWT_SECRET is required outside the dev platform. "
                    "Set JWT_SECRET in your environment or .env file. "
                    "To run in development mode, set PLATFORM=dev."
                )
        if len(self.jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters.")
        if not self.polka_key:
            logger.warning("POLKA_KEY is not set -- every webhook call will be rejected.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
