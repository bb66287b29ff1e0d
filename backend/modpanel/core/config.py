"""Application configuration settings.

All configuration values are loaded from environment variables (.env file).
Every value has a default so the engine can be imported without any
environment present.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    PROJECT_NAME: str = "Moderation Panel Engine"
    VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON_FORMAT: bool = True
    LOG_INCLUDE_STACK_TRACE: bool = True

    # Status thresholds used when the operator has not configured any
    DEFAULT_SOCIAL_MEDIUM_THRESHOLD: int = 4
    DEFAULT_SOCIAL_HABITUAL_THRESHOLD: int = 8
    DEFAULT_GAMEPLAY_MEDIUM_THRESHOLD: int = 5
    DEFAULT_GAMEPLAY_HABITUAL_THRESHOLD: int = 10

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
