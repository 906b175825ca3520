"""Tracking client configuration loaded from environment variables."""
import os
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    """Client settings loaded from environment."""

    api_url: str = "http://localhost:8000"
    token: Optional[str] = None
    local_db: str = os.path.join(os.path.expanduser("~"), ".posturepal", "posturepal-local.db")
    tick_seconds: float = 2.0
    request_timeout: float = 10.0
    log_level: str = "WARNING"

    class Config:
        env_prefix = "POSTUREPAL_"
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_client_settings() -> ClientSettings:
    return ClientSettings()
