# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)
      - DATABASE_URL (Supabase Postgres connection string)
      - SUPABASE_JWT_SECRET (JWT signing secret from Supabase project settings)

    Optional:
      - SUPABASE_SERVICE_ROLE_KEY (needed for signed storage URLs)
      - COACH_ACCESS_CODE (lets a client unlock coach capability)
      - CRON_SECRET (protects the reminder batch endpoint)
    """

    PROJECT_NAME: str = "Steadfast API"
    API_V1_STR: str = "/api/v1"

    # Supabase / DB config
    SUPABASE_URL: str
    SUPABASE_KEY: str
    DATABASE_URL: str

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_ALG: str = "HS256"

    # Service role key bypasses RLS (backend only)
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    # Scheduling
    # Used when a user has no timezone or an unknown IANA name.
    DEFAULT_TIMEZONE: str = "America/Los_Angeles"

    # Storage
    CHECK_IN_PHOTO_BUCKET: str = "check-in-photos"
    SIGNED_URL_TTL_SECONDS: int = 60 * 60

    # Access control for coach sign-up and the cron trigger
    COACH_ACCESS_CODE: str | None = None
    CRON_SECRET: str | None = None

    # Used to build links inside notification emails
    APP_BASE_URL: str = ""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
