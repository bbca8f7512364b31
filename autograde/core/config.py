"""
Library configuration.

Centralized configuration management with environment variables.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Grading settings"""

    # Application
    APP_NAME: str = "autograde"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development, staging, production

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or text
    LOG_FILE: Optional[str] = None

    # Authoring
    DEFAULT_TOTAL_POINTS: int = 100
    MAX_QUESTION_COUNT: int = 100
    EXTRA_ESSAY_KEYWORDS: list[str] = []

    # Grading
    OR_SELECTION_POLICY: str = "any_overlap"  # any_overlap or no_wrong_selection
    ENFORCE_SUB_QUESTION_POINTS: bool = False

    # Bulk regrade
    REGRADE_MAX_WORKERS: int = 1

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
