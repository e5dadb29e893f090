# cems/core/config.py

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Values come from the process environment (or a local .env in development).
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # The environment mode: 'local' or 'prod'
    ENV: str = "local"

    # --- Database ---
    DATABASE_URL_LOCAL: str = "sqlite:///./cems.db"
    DATABASE_URL_PROD: str = "postgresql://cems:cems@db:5432/cems_database"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 0

    # --- Secrets ---
    JWT_SECRET: str = "change-me-jwt-secret"
    JWT_ALGORITHM: str = "HS256"
    QR_SIGNING_SECRET: str = "change-me-qr-signing-secret"

    # --- Pass artifacts ---
    UPLOADS_DIR: str = "uploads"
    UPLOADS_URL_PREFIX: str = "/uploads"

    # --- Email (Resend) ---
    RESEND_API_KEY: Optional[str] = None
    RESEND_FROM_DOMAIN: str = "cems.local"
    EMAIL_FROM_NAME: str = "CEMS"

    # --- HTTP ---
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    RATE_LIMIT_ENABLED: bool = True
    REGISTRATION_RATE_LIMIT: str = "30/minute"

    LOG_LEVEL: str = "INFO"

    @property
    def DATABASE_URL(self) -> str:
        return (
            self.DATABASE_URL_LOCAL if self.ENV == "local" else self.DATABASE_URL_PROD
        )

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


# Create a single instance of the settings
settings = Settings()
