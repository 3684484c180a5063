from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database (set via .env; avoid hardcoding secrets here)
    DATABASE_URL: str = "sqlite:///./festival.db"

    # Security
    SECRET_KEY: str = "CHANGE_THIS_TO_A_SECRET_KEY"
    ADMIN_TOKEN_MAX_AGE_SECONDS: int = 12 * 60 * 60  # 12 hours
    RATE_LIMIT_LOGIN_ATTEMPTS: int = 5
    RATE_LIMIT_LOGIN_WINDOW_SECONDS: int = 900

    # App/Base URL (used for confirmation links in QR codes)
    BASE_URL: str = "http://localhost:5000"

    # Pricing
    CURRENCY: str = "aed"
    # How long a loaded catalog snapshot is reused before the next poll
    CATALOG_REFRESH_SECONDS: int = 5

    # Stripe
    STRIPE_PUBLISHABLE_KEY: str = ""
    STRIPE_SECRET_KEY: str = ""

    # Logging
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_JSON: bool = True
    LOG_FILE: str = "logs/app.log"
    LOG_MAX_BYTES: int = 5_000_000  # 5 MB
    LOG_BACKUP_COUNT: int = 5

    # Sentry
    SENTRY_DSN: str = ""
    SENTRY_TRACES_SAMPLE_RATE: float = 0.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()

if settings.SECRET_KEY == "CHANGE_THIS_TO_A_SECRET_KEY" or not settings.SECRET_KEY:
    # Do not crash imports in some tools; instead, provide a helpful message.
    import warnings

    warnings.warn(
        "SECRET_KEY is not configured in .env; admin tokens are signed with the "
        "default key. Set SECRET_KEY and restart the app."
    )
