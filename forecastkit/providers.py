"""Provider adapters mapping external weather APIs onto WeatherRecord."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Mapping, Optional, Protocol

from forecastkit.client import NetworkClient, NetworkRequest
from forecastkit.endpoint import OPEN_METEO_BASE_URL, WEATHER_API_BASE_URL, Endpoint
from forecastkit.errors import GeocodingError, InvalidResponse
from forecastkit.geocoding import Geocoder
from forecastkit.models import (
    Location,
    OpenMeteoResponse,
    WeatherAPIResponse,
    WeatherRecord,
    kmh_to_ms,
)
from forecastkit.retry import RetryPolicy

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "forecastkit/0.1.0"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProviderType(str, Enum):
    OPEN_METEO = "open-meteo"
    WEATHER_API = "weatherapi"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    ProviderType.OPEN_METEO: "Open-Meteo",
    ProviderType.WEATHER_API: "WeatherAPI.com",
}


# WMO weather interpretation codes, https://open-meteo.com/en/docs
_WEATHER_CODES: dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Fog",
    51: "Drizzle",
    53: "Drizzle",
    55: "Drizzle",
    56: "Freezing drizzle",
    57: "Freezing drizzle",
    61: "Rain",
    63: "Rain",
    65: "Rain",
    66: "Freezing rain",
    67: "Freezing rain",
    71: "Snow fall",
    73: "Snow fall",
    75: "Snow fall",
    77: "Snow grains",
    80: "Rain showers",
    81: "Rain showers",
    82: "Rain showers",
    85: "Snow showers",
    86: "Snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with hail",
    99: "Thunderstorm with hail",
}


def describe_weather_code(code: int) -> str:
    """Human-readable text for a WMO weather code."""
    return _WEATHER_CODES.get(code, "Unknown")


class WeatherProvider(Protocol):
    name: str

    async def fetch(self, location: Location) -> WeatherRecord:
        """Fetch current conditions for ``location``.

        Raises:
            NetworkError: the provider could not be queried or answered badly.
        """
        ...


def _default_headers(user_agent: str) -> dict[str, str]:
    return {"Accept": "application/json", "User-Agent": user_agent}


class OpenMeteoProvider:
    """Open-Meteo current conditions; coordinates come from a geocoder."""

    name = ProviderType.OPEN_METEO.display_name

    def __init__(
        self,
        client: NetworkClient,
        geocoder: Geocoder,
        *,
        base_url: str = OPEN_METEO_BASE_URL,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        clock: Clock = utc_now,
    ) -> None:
        self._client = client
        self._geocoder = geocoder
        self._base_url = base_url
        self._retry_policy = retry_policy
        self._timeout = timeout
        self._headers = _default_headers(user_agent)
        self._clock = clock

    async def fetch(self, location: Location) -> WeatherRecord:
        try:
            coordinates = await self._geocoder.resolve(location.name)
        except GeocodingError as exc:
            logger.error("Geocoding failed for %r: %s", location.name, exc)
            raise InvalidResponse() from exc

        request = NetworkRequest(
            endpoint=Endpoint.open_meteo_forecast(
                coordinates.latitude, coordinates.longitude, base_url=self._base_url
            ),
            response_model=OpenMeteoResponse,
            headers=self._headers,
            timeout=self._timeout,
        )
        response = await self._client.request(request, retry_policy=self._retry_policy)
        current = response.current
        return WeatherRecord(
            location=location.name,
            temperature=current.temperature,
            feels_like=current.apparent_temperature,
            humidity=current.relative_humidity,
            description=describe_weather_code(current.weather_code),
            wind_speed=kmh_to_ms(current.wind_speed),
            provider=self.name,
            timestamp=self._clock(),
        )


class WeatherAPIProvider:
    """WeatherAPI.com current conditions, queried by free-text place name."""

    name = ProviderType.WEATHER_API.display_name

    def __init__(
        self,
        client: NetworkClient,
        api_key: str,
        *,
        base_url: str = WEATHER_API_BASE_URL,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        clock: Clock = utc_now,
    ) -> None:
        self._client = client
        self._api_key = api_key
        self._base_url = base_url
        self._retry_policy = retry_policy
        self._timeout = timeout
        self._headers = _default_headers(user_agent)
        self._clock = clock

    async def fetch(self, location: Location) -> WeatherRecord:
        request = NetworkRequest(
            endpoint=Endpoint.weather_api_current(
                location.name, self._api_key, base_url=self._base_url
            ),
            response_model=WeatherAPIResponse,
            headers=self._headers,
            timeout=self._timeout,
        )
        response = await self._client.request(request, retry_policy=self._retry_policy)
        current = response.current
        return WeatherRecord(
            location=location.name,
            temperature=current.temp_c,
            feels_like=current.feelslike_c,
            humidity=current.humidity,
            description=current.condition.text,
            wind_speed=kmh_to_ms(current.wind_kph),
            provider=self.name,
            timestamp=self._clock(),
        )


ProviderMap = Mapping[ProviderType, WeatherProvider]
