from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = Field("DailySync")
    APP_VERSION: str = Field("1.0.0")
    LOG_LEVEL: str = Field("INFO")

    # Database
    DATABASE_URL: str = Field("sqlite:///./dev.db")
    CREATE_TABLES_ON_STARTUP: bool = Field(True)

    # JWT sessions
    JWT_SECRET_KEY: str = Field("replace-me-with-strong-secret")
    JWT_ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_SECONDS: int = Field(60 * 60 * 24 * 7)

    # CORS
    CORS_ALLOW_ORIGINS: str = Field("*")

    # Redis / Celery
    CELERY_BROKER_URL: str = Field("redis://localhost:6379/0")
    CELERY_RESULT_BACKEND: str | None = Field(None)
    CELERY_TASK_ALWAYS_EAGER: bool = Field(False)

    # Webhooks
    WEBHOOK_URL_MAX_ATTEMPTS: int = Field(5)
    WEBHOOK_SIGNATURE_HEADER: str = Field("X-Webhook-Signature")

    # Analytics windows
    ANALYTICS_DAILY_WINDOW_DAYS: int = Field(30)
    ANALYTICS_BREAKDOWN_DAYS: int = Field(7)
    ANALYTICS_DASHBOARD_WINDOW_DAYS: int = Field(7)
    ANALYTICS_ROLLUP_SIZE: int = Field(30)

    # Pagination
    DEFAULT_PAGE_SIZE: int = Field(10)
    MAX_PAGE_SIZE: int = Field(100)


settings = Settings()
