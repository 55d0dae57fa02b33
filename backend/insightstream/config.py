"""Application configuration management."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite:///./insightstream.db"
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20

    # Security
    SECRET_KEY: str = "change-me"
    JWT_SECRET_KEY: str = "change-me-too"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    # CORS
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # Logging / error tracking
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # "json" or "text"
    SENTRY_DSN: str = ""

    # APScheduler
    SCHEDULER_ENABLED: bool = True
    SCHEDULER_EXECUTORS_DEFAULT_MAX_WORKERS: int = 2
    DAILY_REFRESH_HOUR: int = 3
    DAILY_REFRESH_MINUTE: int = 0
    DAILY_REFRESH_TIMEZONE: str = "America/Los_Angeles"

    # Chat usage limiter
    CHAT_DAILY_LIMIT: int = 10
    CHAT_WINDOW_HOURS: int = 24

    # Generative AI
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash"

    # Vendor APIs
    INSTAGRAM_SCRAPER_HOST: str = "instagram-api-fast-reliable-data-scraper.p.rapidapi.com"
    GA_MEASUREMENT_ID: str = ""
    HTTP_TIMEOUT_SECONDS: int = 30
    YOUTUBE_COMMENTS_MAX_RESULTS: int = 10

    # Application
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse ALLOWED_ORIGINS comma-separated string into list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


# Global settings instance
settings = Settings()
