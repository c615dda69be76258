"""
Centralized application configuration.

This module uses Pydantic's BaseSettings to load configuration from
environment variables and a .env file, providing a single, type-safe
source of truth for all settings.
"""

import os
from typing import Optional

from dateutil import tz
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # --- Core API Settings ---
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Parka Health API"
    LOG_LEVEL: str = "INFO"

    # --- Calendar Settings ---
    # Every "day" boundary (entry expiry, daily aggregation) uses this zone.
    TIMEZONE: str = "UTC"

    # --- Language Model (Groq) Settings ---
    GROQ_API_KEY: Optional[str] = None
    LLM_MODEL_NAME: str = "llama-3.1-8b-instant"
    TEMPERATURE: float = 0.4
    MAX_OUTPUT_TOKENS: int = 200
    LLM_TIMEOUT_SECONDS: float = 30.0

    # --- Wearable Bridge Settings ---
    WEARABLE_BRIDGE_URL: Optional[str] = None  # in-memory source when unset
    WEARABLE_TIMEOUT_SECONDS: float = 30.0
    DEFAULT_RANGE_DAYS: int = 7

    # --- Daily Sweep Settings ---
    ENABLE_DAILY_SWEEP: bool = True
    DAILY_SWEEP_HOUR: int = 0
    DAILY_SWEEP_MINUTE: int = 0

    # --- Report Settings ---
    TEMPLATE_DIRECTORY: str = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")

    # --- Pydantic Model Configuration ---
    class Config:
        """Loads settings from the specified .env file."""
        env_file = ".env"
        env_file_encoding = 'utf-8'

    @property
    def tzinfo(self):
        """The configured calendar zone, falling back to UTC for unknown names."""
        return tz.gettz(self.TIMEZONE) or tz.UTC


# Create a single, globally accessible settings instance
settings = Settings()
