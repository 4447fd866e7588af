"""
Application settings, read from the environment (and .env) with pydantic-settings.

Importing this module builds the settings once; a missing or invalid
required variable stops the process with a short help text on stderr.
"""

import sys
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

REQUIRED_ENV = {
    "MONGODB_URI": "MongoDB connection string",
    "MONGODB_DB": "Database name",
    "JWT_SECRET": "Secret used to verify user JWTs (min 32 chars)",
    "CRON_SECRET": "Secret guarding /cron/sync (min 16 chars)",
    "RIOT_API_KEY": "Riot Games developer API key",
}

OPTIONAL_ENV = {
    "RIOT_MIN_CALL_INTERVAL_MS": "Spacing between Riot calls per player (default: 100)",
    "LEADERBOARD_MATCH_WINDOW": "Recent matches counted per player (default: 100)",
    "REDIS_URL": "Redis URL shared by API workers for rate limiting",
    "RATE_LIMIT": "Requests per client per period (default: 60)",
    "RATE_PERIOD": "Rate limit window in seconds (default: 60)",
    "CORS_ORIGINS": "Comma-separated allowed origins",
    "LOG_LEVEL": "Logging level (default: INFO)",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    mongodb_uri: str = Field(..., description="MongoDB connection URI")
    mongodb_db: str = Field(..., description="MongoDB database name")
    mongo_max_pool_size: int = Field(default=50, ge=1, le=200)
    mongo_min_pool_size: int = Field(default=5, ge=0, le=50)
    mongo_server_selection_timeout_ms: int = Field(default=5000, ge=1000)

    # Auth
    jwt_secret: str = Field(..., min_length=32, description="Key that user JWTs are signed with")
    jwt_algorithm: str = "HS256"
    cron_secret: str = Field(..., min_length=16, description="Shared secret for the scheduled sync")

    # Riot API
    riot_api_key: str = Field(..., description="Sent as X-Riot-Token")
    riot_timeout_seconds: float = Field(default=10.0, gt=0)
    riot_min_call_interval_ms: int = Field(
        default=100, ge=0, description="Minimum gap between two calls for the same player"
    )
    riot_throttle_capacity: int = Field(
        default=1000, ge=1, description="Players the call throttle keeps timestamps for"
    )

    # Leaderboard
    leaderboard_match_window: int = Field(default=100, ge=1)
    recent_matches_limit: int = Field(default=5, ge=1, le=50)

    # Inbound rate limiting
    rate_limit: int = Field(default=60, ge=1, description="Requests allowed per window")
    rate_period: int = Field(default=60, ge=1, description="Window length in seconds")
    redis_url: Optional[str] = Field(
        default=None, description="Without it, counters are kept in process memory"
    )

    cors_origins: str = "http://localhost,http://localhost:3000"
    log_level: str = "INFO"

    @field_validator("cors_origins")
    @classmethod
    def check_cors_origins(cls, v: str) -> str:
        if not [o for o in v.split(",") if o.strip()]:
            raise ValueError("At least one CORS origin must be specified")
        return v

    def get_cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


def _print_env_help(error: Exception) -> None:
    print(f"Configuration Error: {error}", file=sys.stderr)
    print("\nRequired environment variables:", file=sys.stderr)
    for name, help_text in REQUIRED_ENV.items():
        print(f"  - {name}: {help_text}", file=sys.stderr)
    print("\nOptional environment variables:", file=sys.stderr)
    for name, help_text in OPTIONAL_ENV.items():
        print(f"  - {name}: {help_text}", file=sys.stderr)


try:
    settings = get_settings()
except Exception as e:
    _print_env_help(e)
    raise
