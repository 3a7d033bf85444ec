from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    DB_URL: str
    REDIS_URL: str = "redis://localhost:6379/0"

    SECRET_KEY: str
    REFRESH_SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    ACCESS_TOKEN_COOKIE_NAME: str = "access_token"
    REFRESH_TOKEN_COOKIE_NAME: str = "refresh_token"
    ACCESS_TOKEN_HTTPONLY: bool = True
    REFRESH_TOKEN_HTTPONLY: bool = True
    COOKIE_DOMAIN: str | None = None
    COOKIE_SECURE: bool = False
    COOKIE_SAMESITE: str = "lax"

    FRONTEND_URL: str = "http://localhost:5173"
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    STRIPE_SECRET_KEY: str | None = None
    STRIPE_WEBHOOK_SECRET: str | None = None
    STRIPE_API_VERSION: str = "2023-10-16"
    STRIPE_MONTHLY_PRICE_ID: str = Field(
        default="price_monthly_test",
        validation_alias=AliasChoices("STRIPE_MONTHLY_PRICE_ID", "VITE_STRIPE_MONTHLY_PRICE_ID"),
    )
    STRIPE_QUARTERLY_PRICE_ID: str = Field(
        default="price_quarterly_test",
        validation_alias=AliasChoices("STRIPE_QUARTERLY_PRICE_ID", "VITE_STRIPE_QUARTERLY_PRICE_ID"),
    )
    STRIPE_LIFETIME_PRICE_ID: str = Field(
        default="price_lifetime_test",
        validation_alias=AliasChoices("STRIPE_LIFETIME_PRICE_ID", "VITE_STRIPE_LIFETIME_PRICE_ID"),
    )
    STRIPE_CONNECT_COUNTRY: str = "US"
    STRIPE_CURRENCY: str = "usd"

    PLATFORM_FEE_PERCENT: int = 10
    DEFAULT_IDEA_PRICE_CENTS: int = 5000   # $50.00
    PARTNERSHIP_FEE_CENTS: int = 500       # $5.00
    MIN_WITHDRAWAL_CENTS: int = 1000       # $10.00

    AWS_REGION: str = "us-east-1"
    BUCKET_NAME: str = "ideahub-uploads"
    AVATAR_PREFIX: str = "avatars"
    PUBLIC_BUCKET_URL: str | None = None
    MAX_AVATAR_BYTES: int = 5 * 1024 * 1024

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_AUTH_MAX: int = 10
    RATE_LIMIT_AUTH_WINDOW: int = 60
    RATE_LIMIT_BILLING_MAX: int = 5
    RATE_LIMIT_BILLING_WINDOW: int = 60

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[1].parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

settings = Settings()
