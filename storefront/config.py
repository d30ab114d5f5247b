from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database. POSTGRES_HOST switches from the local SQLite file to PostgreSQL
    SQLITE_URL: str = "sqlite:///./storefront.db"
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_HOST: Optional[str] = None
    POSTGRES_PORT: str = "5432"
    POSTGRES_DB: Optional[str] = None

    @property
    def DATABASE_URL(self) -> str:
        if self.POSTGRES_HOST:
            return f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        return self.SQLITE_URL

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    # OTP policy
    OTP_LENGTH: int = 6
    OTP_EXPIRE_MINUTES: int = 10
    OTP_RESEND_COOLDOWN_SECONDS: int = 60
    OTP_MAX_FAILED_ATTEMPTS: int = 5
    OTP_LOCKOUT_MINUTES: int = 30
    RESET_TOKEN_EXPIRE_MINUTES: int = 5

    # Password policy enforced by the user directory
    PASSWORD_MIN_LENGTH: int = 6

    LOW_STOCK_THRESHOLD: int = 10
    RECENT_ORDERS_LIMIT: int = 10

    # Seeded on startup when both are set
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None
    ADMIN_DISPLAY_NAME: str = "Administrator"

    # Email configuration
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    EMAILS_FROM: Optional[str] = None
    SMTP_TLS: bool = True  # Default to True for security
    SMTP_SSL: bool = False  # Typically use either TLS or SSL, not both

    LOG_FILE: Optional[str] = "logs/app.log"

    @field_validator("SMTP_PORT", mode="before")
    @classmethod
    def cast_smtp_port(cls, v):
        if v is None or v == "":
            return 587
        # Remove comments and whitespace
        if isinstance(v, str):
            v = v.split('#')[0].strip()
        return int(v)


settings = Settings()
