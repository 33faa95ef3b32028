"""Settings for the course service."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CourseServiceSettings(BaseSettings):
    ordering_policy: str = Field(default="shift", alias="COURSE_ORDERING_POLICY")
    log_level: str = Field(default="INFO", alias="COURSE_LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, alias="COURSE_LOG_FILE")
    host: str = Field(default="0.0.0.0", alias="COURSE_HOST")
    port: int = Field(default=8002, alias="COURSE_PORT")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> CourseServiceSettings:
    """Return cached course service settings."""

    return CourseServiceSettings()


def reset_settings_cache() -> None:
    get_settings.cache_clear()


__all__ = ["CourseServiceSettings", "get_settings", "reset_settings_cache"]
