from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # === App Metadata ===
    PROJECT_NAME: str = "MockHire"
    ENVIRONMENT: str = "dev"  # dev, staging, prod
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:8080"

    # === Security ===
    API_KEY: str = "super-secret-key"
    ENABLE_API_KEY_SECURITY: bool = False
    JWT_SECRET: str = ""  # empty -> tokens are decoded without signature verification
    JWT_ALGORITHM: str = "HS256"

    # === Database (PostgreSQL or SQLite fallback) ===
    DB_HOST: str = "sqlite"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "mockhire_db"
    DATABASE_URL_OVERRIDE: Optional[str] = Field(None, validation_alias="DATABASE_URL")

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        if self.DB_HOST == "sqlite":
            return "sqlite:///./mockhire.db"
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # === Payment provider ===
    PAYMENT_MODE: str = "test"  # test -> sandbox endpoint and credentials
    PAYMENT_TEST_APP_ID: str = ""
    PAYMENT_TEST_SECRET_KEY: str = ""
    PAYMENT_PROD_APP_ID: str = ""
    PAYMENT_PROD_SECRET_KEY: str = ""
    PAYMENT_SANDBOX_URL: str = "https://sandbox.cashfree.com/pg/orders"
    PAYMENT_PRODUCTION_URL: str = "https://api.cashfree.com/pg/orders"
    PAYMENT_API_VERSION: str = "2023-08-01"
    PAYMENT_TIMEOUT_SECONDS: int = 15
    PAYMENT_NOTIFY_URL: str = "http://localhost:8000/webhooks/payment"
    PAYMENT_RETURN_URL: str = "https://example.com/book?payment=success"
    RESUME_REVIEW_NOTIFY_URL: str = "http://localhost:8000/resume-reviews/webhook"
    DEFAULT_CUSTOMER_PHONE: str = "+919999999999"
    CURRENCY: str = "INR"

    @property
    def PAYMENT_TEST_MODE(self) -> bool:
        return self.PAYMENT_MODE.lower() == "test"

    # === Pricing ===
    ESSENTIAL_PLAN_PRICE: int = 499
    PROFESSIONAL_PLAN_PRICE: int = 999
    EXECUTIVE_PLAN_PRICE: int = 1299
    RESUME_REVIEW_PRICE: int = 199

    # === Booking ===
    RESERVATION_TTL_MINUTES: int = 10
    DEFAULT_INTERVIEW_MINUTES: int = 60
    MIN_MATCH_SCORE: int = 20
    FALLBACK_MEETING_LINK: str = "https://meet.google.com/new"

    # === Email SMTP ===
    SMTP_SERVER: str = "smtp.mailtrap.io"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    DEFAULT_SENDER: str = "noreply@mockhire.in"
    ADMIN_EMAIL: str = "admin@mockhire.in"

    @property
    def SMTP_ENABLED(self) -> bool:
        return all([self.SMTP_SERVER, self.SMTP_USER, self.SMTP_PASSWORD])

    # === Google Calendar ===
    GOOGLE_CALENDAR_ENABLED: bool = False
    GOOGLE_CALENDAR_ID: str = "primary"
    GOOGLE_CREDENTIALS_FILE: str = "secrets/gcal_service_account.json"
    CALENDAR_TIMEZONE: str = "Asia/Kolkata"

    # === Feature Flags ===
    ENABLE_PROMETHEUS: bool = True
    ENABLE_AUTO_BOOKING: bool = True
    SEED_DEFAULT_ADD_ONS: bool = True

    @property
    def ORIGINS(self) -> list:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> AppConfig:
    return AppConfig()


# Global config instance
settings = get_settings()
