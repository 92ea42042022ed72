from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./shiftboard.db"
    BACKEND_CORS_ORIGINS: List[str] = []
    LOG_LEVEL: str = "INFO"

    # recurrence expansion
    EXPANSION_MAX_OCCURRENCES: int = 1000
    PREVIEW_MAX_OCCURRENCES: int = 50
    PREVIEW_HORIZON_DAYS: int = 90

    # default look-ahead for /shifts/available
    AVAILABLE_WINDOW_DAYS: int = 14

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
