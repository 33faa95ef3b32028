"""Settings for the API gateway."""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewaySettings(BaseSettings):
    secret_key: str = Field(default="your-secret-key-change-in-production", alias="GATEWAY_SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="GATEWAY_ALGORITHM")
    access_token_expire_minutes: int = Field(default=30, alias="GATEWAY_ACCESS_TOKEN_EXPIRE_MINUTES")
    course_service_url: str = Field(default="http://localhost:8002", alias="GATEWAY_COURSE_SERVICE_URL")
    timeout_seconds: float = Field(default=10.0, alias="GATEWAY_TIMEOUT_SECONDS")
    log_file: Optional[str] = Field(default=None, alias="GATEWAY_LOG_FILE")
    host: str = Field(default="0.0.0.0", alias="GATEWAY_HOST")
    port: int = Field(default=8000, alias="GATEWAY_PORT")
    # JSON object, e.g. GATEWAY_USERS='{"admin": "password123"}'
    users: Dict[str, str] = Field(
        default_factory=lambda: {"admin": "password123", "instructor": "instructor123"},
        alias="GATEWAY_USERS",
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> GatewaySettings:
    """Return cached gateway settings."""

    return GatewaySettings()


def reset_settings_cache() -> None:
    get_settings.cache_clear()


__all__ = ["GatewaySettings", "get_settings", "reset_settings_cache"]
