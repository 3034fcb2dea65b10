"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for JobHunter happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file. Field names map to env var names
      (e.g. access_token_ttl_seconds -> ACCESS_TOKEN_TTL_SECONDS).

  @model_validator(mode="after"): Cross-field validation after all fields are
      resolved. A missing or unusable value raises here, so a misconfigured
      deployment fails at startup rather than on the first login request.

Security notes:
  SECRET_KEY shorter than 32 chars is rejected. JWT signing relies on key
  entropy -- a short HS256 key can be brute-forced offline from any token.

  The two token lifetimes have no defaults. Operators must choose them.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/ or company/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("jobhunter.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'jobhunter.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    ACCESS_TOKEN_TTL_SECONDS and REFRESH_TOKEN_TTL_SECONDS are required.
    SECRET_KEY is required unless DEBUG=true, in which case a throwaway key is
    generated (sessions then do not survive a restart).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured".
    secret_key: str = ""
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    access_token_ttl_seconds: int
    refresh_token_ttl_seconds: int
    jwt_issuer: str = "jobhunter"

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    # The refresh cookie is Secure by default. Turning this off is only
    # useful behind a plain-HTTP dev server.
    secure_cookies: bool = True
    cors_origins: list[str] = ["http://localhost:3000"]
    login_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
        Production mode: refuse to start without one.
        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Sessions will not persist across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self

    @model_validator(mode="after")
    def validate_token_lifetimes(self) -> "Settings":
        """Both lifetimes must be positive and the refresh window must cover the access window."""
        if self.access_token_ttl_seconds <= 0:
            raise ValueError("ACCESS_TOKEN_TTL_SECONDS must be a positive number of seconds.")
        if self.refresh_token_ttl_seconds <= 0:
            raise ValueError("REFRESH_TOKEN_TTL_SECONDS must be a positive number of seconds.")
        if self.refresh_token_ttl_seconds < self.access_token_ttl_seconds:
            raise ValueError("REFRESH_TOKEN_TTL_SECONDS must not be shorter than ACCESS_TOKEN_TTL_SECONDS.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
