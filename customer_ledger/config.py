"""
Application configuration.

All configuration is loaded from environment variables.
A .env file in the working directory is read first, so local
overrides never need to be exported by hand.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Customer Ledger"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

    # Statement presentation
    CURRENCY_LABEL: str = os.getenv("CURRENCY_LABEL", "Rs.")
    DUE_SOON_DAYS: int = int(os.getenv("DUE_SOON_DAYS", "7"))


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    The Settings object is created once and reused for all
    subsequent calls, so environment variables are read a
    single time per process.
    """
    return Settings()
