from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "notevault"
    APP_ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str

    REDIS_URL: str = "redis://localhost:6379/0"
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"
    CELERY_TASK_ALWAYS_EAGER: bool = False

    # Generation capability (Anthropic Messages API)
    ANTHROPIC_API_KEY: str | None = None
    ANTHROPIC_API_BASE: str = "https://api.anthropic.com"
    ANTHROPIC_MODEL: str = "claude-sonnet-4-20250514"
    ANTHROPIC_VERSION: str = "2023-06-01"
    ANTHROPIC_TIMEOUT_S: float = 120.0

    # Job runner: total attempts per capture (first run included).
    CAPTURE_MAX_ATTEMPTS: int = 3
    CAPTURE_RETRY_BASE_DELAY_S: float = 5.0

    # Same-capture mutual exclusion across workers (Redis lock).
    CAPTURE_LOCK_ENABLED: bool = False
    CAPTURE_LOCK_TIMEOUT_S: int = 600

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
