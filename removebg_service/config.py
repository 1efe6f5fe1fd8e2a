"""
Configuration loader for the remove.bg proxy service.

Environment variables are centralized here to keep the rest of the code
focused on request handling. The provider key is optional at load time:
a missing key is reported per request, not at startup.
"""

from functools import lru_cache
import logging
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REMOVE_BG_ENDPOINT = "https://api.remove.bg/v1.0/removebg"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # remove.bg provider
    remove_bg_api_key: Optional[str] = None
    remove_bg_endpoint: str = DEFAULT_REMOVE_BG_ENDPOINT

    # Shopify session collaborators
    shopify_api_key: Optional[str] = None
    shopify_api_secret: Optional[str] = None

    # API
    request_timeout_seconds: int = 30
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if not isinstance(logging.getLevelName(v.upper()), int):
            raise ValueError("LOG_LEVEL must be a standard logging level name")
        return v.upper()


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings to avoid reparsing env on every call."""
    return Settings()
