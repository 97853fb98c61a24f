from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration, read from the environment and ``.env``.

    List values such as ``CORS_ORIGINS`` are given as JSON in the environment,
    e.g. ``CORS_ORIGINS='["https://portal.example.com"]'``.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str = "postgresql://postgres:root@db:5432/intern-portal"

    # No default signing secret; TokenService raises ConfigError without one.
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 7 * 24 * 60

    UPLOAD_DIR: str = "uploads"
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10 MB

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    API_RATE_WINDOW_SECONDS: int = 15 * 60
    API_RATE_MAX_REQUESTS: int = 1000
    AUTH_RATE_WINDOW_SECONDS: int = 15 * 60
    AUTH_RATE_MAX_ATTEMPTS: int = 50
    UPLOAD_RATE_WINDOW_SECONDS: int = 60
    UPLOAD_RATE_MAX_UPLOADS: int = 10

    BOOTSTRAP_ADMIN_EMAIL: Optional[str] = None
    BOOTSTRAP_ADMIN_PASSWORD: Optional[str] = None

    @property
    def upload_path(self) -> Path:
        return Path(self.UPLOAD_DIR)


@lru_cache
def get_settings() -> Settings:
    return Settings()
