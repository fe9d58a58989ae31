"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = os.getenv("APP_NAME", "Clinic Cash Drawer")
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/clinic_cash"
    )

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Cash drawer
    # Amounts are whole won; there is no fractional unit.
    CURRENCY: str = os.getenv("CURRENCY", "KRW")
    DEFAULT_DEPOSIT_DESCRIPTION: str = os.getenv(
        "DEFAULT_DEPOSIT_DESCRIPTION", "통장입금"
    )

    # UI-side HTTP client
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:8000")
    CLIENT_TIMEOUT: float = float(os.getenv("CLIENT_TIMEOUT", "10"))


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    The Settings object is created once and reused for all
    subsequent calls.
    """
    return Settings()
