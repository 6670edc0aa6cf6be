"""Application settings and configuration"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env file"""

    model_config = SettingsConfigDict(
        env_prefix="PROJECTDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field("INFO")

    connect_timeout: int = Field(5, ge=1)  # seconds
    statement_timeout: int = Field(30, ge=1)  # seconds
    mysql_charset: str = Field("utf8mb4")

    default_per_page: int = Field(15, ge=1)
    max_per_page: int = Field(100, ge=1)
    default_users_table: str = Field("users")
    created_at_column: str = Field("created_at")

    projects_file: str = Field("config/projects.yaml")

    api_host: str = Field("0.0.0.0")
    api_port: int = Field(8000)
    api_reload: bool = Field(False)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
