"""Configuration management using Pydantic Settings"""

from datetime import timezone, tzinfo
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./smartspend.db"

    # Service
    service_name: str = "smartspend-gateway"
    log_level: str = "INFO"

    # Engines
    local_timezone: str = "UTC"  # IANA name; offset timestamps are shifted into it
    simulation_max_months: int = 600

    @property
    def tz(self) -> tzinfo:
        if self.local_timezone.upper() == "UTC":
            return timezone.utc
        return ZoneInfo(self.local_timezone)


settings = Settings()
