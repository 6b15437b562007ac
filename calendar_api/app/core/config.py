"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables, without ``pydantic_settings``.  Defaults are
provided for all fields so the API starts out of the box; in a
production deployment override at least the two JWT secrets.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Calendar API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    # All route groups (auth, calendar, event) are mounted under this prefix.
    api_prefix: str = os.getenv("API_PREFIX", "/api/v1")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Access and refresh tokens are signed with distinct secrets so that a
    # refresh token can never be presented as an access token.
    jwt_secret: str = os.getenv("JWT_SECRET", "change_me")
    jwt_refresh_secret: str = os.getenv("JWT_REFRESH_SECRET", "change_me_too")
    algorithm: str = os.getenv("ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))
    refresh_token_expire_minutes: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_MINUTES", str(30 * 24 * 60)))

    # IANA time zone name (e.g. ``Europe/Berlin``) used to interpret naive
    # datetimes and to compute day boundaries.  Empty means the server's
    # local time zone.
    timezone: str = os.getenv("TIMEZONE", "")

    # Path to the SQLite database file.  A relative path is resolved
    # relative to the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "calendar.db")

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module.
settings = Settings()
