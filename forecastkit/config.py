from __future__ import annotations

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from forecastkit.endpoint import (
    OPEN_METEO_BASE_URL,
    OPEN_METEO_GEOCODING_BASE_URL,
    WEATHER_API_BASE_URL,
)
from forecastkit.providers import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from forecastkit.retry import RetryPolicy


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FORECASTKIT_", env_file=".env", extra="ignore")

    # Providers
    open_meteo_base_url: str = OPEN_METEO_BASE_URL
    geocoding_base_url: str = OPEN_METEO_GEOCODING_BASE_URL
    weather_api_base_url: str = WEATHER_API_BASE_URL
    # Required only when the WeatherAPI.com provider is used.
    weather_api_key: Optional[str] = None

    # HTTP
    http_timeout_s: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    retry_preset: str = "default"

    @field_validator("retry_preset")
    @classmethod
    def _check_preset(cls, value: str) -> str:
        RetryPolicy.from_name(value)
        return value.strip().lower()

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy.from_name(self.retry_preset)
