# backend/messenger/config/settings.py
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Messenger Backend"
    SECRET_KEY: str = "change_me_to_a_random_secret"  # override in production
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    SQLALCHEMY_DATABASE_URL: str = "sqlite:///./messenger.db"

    # default window for the incremental conversation query
    CONVERSATION_LOOKBACK_HOURS: int = 24
    # error texts containing this marker are reported as 500
    STORAGE_ERROR_MARKER: str = "sqlite3"

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"  # values can be overridden from .env


settings = Settings()
