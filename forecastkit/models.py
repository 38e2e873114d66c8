"""Pydantic v2 models for provider responses and the universal weather record."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

LOCATION_MIN_LENGTH = 2
LOCATION_MAX_LENGTH = 100

KMH_PER_MS = 3.6


def kmh_to_ms(speed_kmh: float) -> float:
    """Convert km/h to m/s."""
    return speed_kmh / KMH_PER_MS


# ---------------------------------------------------------------------------
# Universal models
# ---------------------------------------------------------------------------


class WeatherRecord(BaseModel):
    """Current conditions, independent of the provider that reported them."""

    location: str
    temperature: float
    feels_like: float = Field(alias="feelsLike")
    humidity: int
    description: str = Field(alias="weatherDescription")
    wind_speed: float = Field(alias="windSpeed")  # m/s
    provider: str = Field(alias="serviceName")
    timestamp: datetime

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def temperature_text(self) -> str:
        return f"{self.temperature:.1f}°C"

    @property
    def feels_like_text(self) -> str:
        return f"{self.feels_like:.1f}°C"

    @property
    def wind_speed_text(self) -> str:
        return f"{self.wind_speed:.1f} m/s"

    @property
    def humidity_text(self) -> str:
        return f"{self.humidity}%"


class Location(BaseModel):
    """A validated place name, trimmed of surrounding whitespace.

    Names are 2-100 characters of letters, whitespace, hyphens,
    apostrophes and commas.
    """

    name: str

    model_config = ConfigDict(frozen=True)

    @staticmethod
    def validation_error(text: str) -> Optional[str]:
        """Return the first failing rule's message, or None if valid."""
        trimmed = text.strip()
        if not trimmed:
            return "Location cannot be empty"
        if len(trimmed) < LOCATION_MIN_LENGTH:
            return f"Location must be at least {LOCATION_MIN_LENGTH} characters"
        if len(trimmed) > LOCATION_MAX_LENGTH:
            return f"Location must be less than {LOCATION_MAX_LENGTH} characters"
        if not all(ch.isalpha() or ch.isspace() or ch in "-'," for ch in trimmed):
            return "Location contains invalid characters"
        return None

    @classmethod
    def parse(cls, text: str) -> Optional["Location"]:
        """Build a Location, or None when ``text`` is not a valid name."""
        if cls.validation_error(text) is not None:
            return None
        return cls(name=text)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        error = cls.validation_error(value)
        if error is not None:
            raise ValueError(error)
        return value.strip()


class Coordinates(BaseModel):
    latitude: float
    longitude: float

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Open-Meteo models
# ---------------------------------------------------------------------------


class OpenMeteoCurrent(BaseModel):
    temperature: float = Field(alias="temperature_2m")
    relative_humidity: int = Field(alias="relative_humidity_2m")
    apparent_temperature: float
    weather_code: int
    wind_speed: float = Field(alias="wind_speed_10m")  # km/h
    time: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class OpenMeteoResponse(BaseModel):
    """Response from GET https://api.open-meteo.com/v1/forecast."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None
    current: OpenMeteoCurrent


class GeocodingResult(BaseModel):
    name: str
    latitude: float
    longitude: float
    country: Optional[str] = None


class GeocodingResponse(BaseModel):
    """Response from GET https://geocoding-api.open-meteo.com/v1/search.

    ``results`` is absent when nothing matched.
    """

    results: list[GeocodingResult] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# WeatherAPI.com models
# ---------------------------------------------------------------------------


class WeatherAPICondition(BaseModel):
    text: str


class WeatherAPICurrent(BaseModel):
    temp_c: float
    humidity: int
    feelslike_c: float
    wind_kph: float
    condition: WeatherAPICondition


class WeatherAPILocation(BaseModel):
    name: str


class WeatherAPIResponse(BaseModel):
    """Response from GET https://api.weatherapi.com/v1/current.json."""

    location: Optional[WeatherAPILocation] = None
    current: WeatherAPICurrent
