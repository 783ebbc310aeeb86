"""
Configuration management for the Mystira session engine
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Server Configuration
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    debug: bool = Field(default=False)

    # Logging
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)

    # Database Configuration
    database_path: str = Field(
        default="data/mystira.db",
        description="SQLite database file path for storing scenarios and sessions",
    )

    # Gameplay Configuration
    compass_min_value: float = Field(default=-2.0)
    compass_max_value: float = Field(default=2.0)
    achievement_threshold: float = Field(
        default=3.0,
        description="Absolute compass value that earns an axis badge",
    )
    recent_echo_count: int = Field(default=5)

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
