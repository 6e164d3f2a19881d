"""
Configuration management for OrganizeSe
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "OrganizeSe"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///./organizese.db"

    # Scheduling
    TIMEZONE: str = "America/Sao_Paulo"
    ROUTINE_MAX_OCCURRENCES: int = 100  # hard cap on generated routine dates

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:8080"]

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
