"""Configuration settings for the intelligence dashboard API."""
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """HTTP server settings loaded from environment variables."""

    TITLE: str = "Military Intelligence Dashboard API"
    VERSION: str = "1.0.0"

    # Start the minute cadence loop with the app
    ENABLE_SCHEDULER: bool = os.getenv("ENABLE_SCHEDULER", "true").lower() == "true"

    # Server settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", 8000))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
