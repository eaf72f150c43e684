"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Bookshelf happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. access_token_secret -> ACCESS_TOKEN_SECRET).

  @model_validator(mode="after"): Cross-field validation of the two signing
      secrets once every field is resolved.

Security notes:
  [S1] Both signing secrets are mandatory. There is no fallback key of any
       kind: a missing secret is a hard startup failure.

  [S2] Access and refresh secrets must differ. A leaked access secret must not
       let an attacker forge refresh tokens.

  [S3] Secrets shorter than 32 chars are rejected. HS256 signing relies on key
       entropy.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or books/.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'bookshelf.db'}"

_MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    The two token secrets have no usable default; everything else does, so a
    deployment only has to provide ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Token signing
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured"; the validator below
    # refuses to build a Settings object while either one is still empty.
    access_token_secret: str = ""
    refresh_token_secret: str = ""

    access_token_ttl_seconds: int = Field(default=3600, gt=0)  # 1 hour
    refresh_token_ttl_seconds: int = Field(default=7 * 24 * 3600, gt=0)  # 7 days

    # ------------------------------------------------------------------
    # Cookies
    # ------------------------------------------------------------------

    # Outlives the access token TTL, so an expired token still
    # reaches the server and is rejected as unauthorized, not missing.
    access_cookie_max_age: int = Field(default=24 * 3600, gt=0)
    refresh_cookie_max_age: int = Field(default=7 * 24 * 3600, gt=0)
    secure_cookies: bool = False

    # ------------------------------------------------------------------
    # Password hashing
    # ------------------------------------------------------------------

    # bcrypt cost factor. Production policy is 12; the test suite lowers it.
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # ------------------------------------------------------------------
    # Storage / HTTP
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secrets(self) -> "Settings":
        """Enforce the signing secret policy [S1] [S2] [S3]."""
        for name in ("access_token_secret", "refresh_token_secret"):
            value = getattr(self, name)
            if not value:
                raise ValueError(
                    f"{name.upper()} is required. Set it in your environment or .env file before starting the API."
                )
            if len(value) < _MIN_SECRET_LENGTH:
                raise ValueError(f"{name.upper()} must be at least {_MIN_SECRET_LENGTH} characters.")
        if self.access_token_secret == self.refresh_token_secret:
            raise ValueError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must be different.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
