"""Конфигурация приложения."""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Настройки приложения."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="WEBAUDIT_", extra="ignore")

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # Audit
    policy_file: Optional[str] = None  # JSON с правилами заголовков, иначе встроенные
    scan_console: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
