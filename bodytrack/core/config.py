"""Application configuration from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment (and .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Bodytrack Measurements API"
    debug: bool = False
    environment: str = "development"
    log_level: str = "info"

    # API
    api_v1_prefix: str = "/api/v1"

    # CORS: comma-separated list of allowed origins in production
    cors_origins: str = ""

    # Remote measurements API (persistence)
    measurements_api_url: str = "http://localhost:3000/api"
    measurements_api_token: str = ""  # Set in .env - never commit
    request_timeout_seconds: float = 10.0

    # History / display
    history_page_limit: int = 10
    recent_days: int = 7

    # Edit sessions held in memory at once; the oldest is evicted beyond this
    max_open_sessions: int = 500

    @property
    def measurements_root_url(self) -> str:
        """API root without the trailing /api segment, used for health probes."""
        base = self.measurements_api_url.rstrip("/")
        if base.endswith("/api"):
            return base[: -len("/api")]
        return base

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
