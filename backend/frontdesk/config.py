"""
Application settings
Read from environment variables and an optional .env file
"""
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    APP_NAME: str = "Frontdesk"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./frontdesk.db"

    # JWT
    SECRET_KEY: str = "frontdesk-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24

    # Bookings
    BOOKING_NUMBER_PREFIX_FORMAT: str = "%Y%m%d"
    DEFAULT_CANCELLATION_REASON: str = "Cancelled by guest"

    model_config = ConfigDict(env_file=".env", case_sensitive=True)


# Global settings instance
settings = Settings()
