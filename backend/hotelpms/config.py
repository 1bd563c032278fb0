"""
Application configuration
Read from environment variables / .env
"""
from decimal import Decimal
from typing import List
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "HotelPMS"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./hotelpms.db"

    # JWT
    SECRET_KEY: str = "hotelpms-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Billing
    DEFAULT_CURRENCY: str = "INR"
    DEFAULT_TAX_RATE: Decimal = Decimal("12")
    INVOICE_DUE_DAYS: int = 7

    # Loyalty: revenue needed to earn one point
    LOYALTY_SPEND_PER_POINT: Decimal = Decimal("10")

    model_config = ConfigDict(env_file=".env", case_sensitive=True)


# Global settings instance
settings = Settings()
