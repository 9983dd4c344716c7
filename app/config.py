"""Application Configuration"""

from typing import List, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Retail Back-Office"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Database (inventory, bills and users share one relational store)
    DATABASE_URL: str
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600

    # Security
    BCRYPT_ROUNDS: int = 10

    # CORS (5173 = Vite default dev server)
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"
    ALLOWED_METHODS: str = "GET,POST,PUT,DELETE,OPTIONS"
    ALLOWED_HEADERS: str = "*"

    # Email (Resend)
    RESEND_API_KEY: str = ""
    EMAIL_FROM: str = ""
    ALERT_EMAIL: Optional[str] = None

    # Receipts
    SHOP_NAME: str = "Retail Store"
    CURRENCY_LABEL: str = "Rs."
    RECEIPT_STORAGE: str = "local"
    RECEIPTS_DIR: str = "bills"
    RECEIPTS_URL_PREFIX: str = "/bills"
    PUBLIC_BASE_URL: str = ""

    # Storage (Cloudflare R2, S3-compatible), used when RECEIPT_STORAGE=r2
    STORAGE_PUBLIC_BASE_URL: str = ""
    R2_ACCOUNT_ID: str = ""
    R2_ACCESS_KEY_ID: str = ""
    R2_SECRET_ACCESS_KEY: str = ""
    R2_BUCKET_NAME: str = ""

    # Low-stock alerts
    LOW_STOCK_THRESHOLD: int = 3
    LOW_STOCK_SCHEDULE_ENABLED: bool = True
    LOW_STOCK_ALERT_HOUR: int = 13
    LOW_STOCK_ALERT_MINUTE: int = 0

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("ALLOWED_ORIGINS")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into a list"""
        return [origin.strip() for origin in v.split(",")]

    @field_validator("ALLOWED_METHODS")
    @classmethod
    def parse_methods(cls, v: str) -> List[str]:
        """Parse comma-separated methods into a list"""
        return [method.strip() for method in v.split(",")]

    @field_validator("RECEIPT_STORAGE")
    @classmethod
    def parse_receipt_storage(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("local", "r2"):
            raise ValueError("RECEIPT_STORAGE must be 'local' or 'r2'")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_test(self) -> bool:
        return self.ENVIRONMENT.lower() == "test"


# Global settings instance
settings = Settings()
