"""
Opsboard: Configuration
All settings are read from environment variables (or .env file).
"""
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    SERVICE_NAME: str = "opsboard"
    SERVICE_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Backend ───────────────────────────────────────────────
    API_BASE: str = "http://localhost:8000"
    DATA_SOURCE: Literal["mock", "http"] = "mock"
    HTTP_TIMEOUT_SECONDS: float = 10.0
    MOCK_LATENCY_MS: int = 0          # simulated round trip for the mock variant

    # ── Session storage ───────────────────────────────────────
    SESSION_BACKEND: Literal["memory", "redis"] = "memory"
    SESSION_TOKEN_KEY: str = "analytics_token"
    SESSION_USER_KEY: str = "analytics_user"

    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""
    REDIS_CONNECT_TIMEOUT: float = 5.0

    @property
    def redis_url(self) -> str:
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
