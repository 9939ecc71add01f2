"""Application configuration and environment variables"""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional, Union
from datetime import tzinfo
from zoneinfo import ZoneInfo
from planner.models import constants


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Persistence Configuration
    STORAGE_PATH: str = "./planner_data.json"
    STORAGE_KEY: str = constants.STORAGE_KEY
    SCHEMA_VERSION: int = constants.SCHEMA_VERSION

    # Local-day bucketing; empty means the system local timezone
    TIMEZONE: str = ""

    # Logging Configuration
    LOG_LEVEL: str = "INFO"

    # CORS Configuration - JSON array or comma-separated string
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:5173"]

    # Application Configuration
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    @field_validator("CORS_ORIGINS")
    @classmethod
    def split_cors_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    def get_timezone(self) -> Optional[tzinfo]:
        """Configured timezone, or None for the system local timezone"""
        if not self.TIMEZONE:
            return None
        return ZoneInfo(self.TIMEZONE)


settings = Settings()
