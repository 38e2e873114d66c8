"""Type-safe request targets and the immutable request descriptor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Sequence
from urllib.parse import quote, urlencode

import httpx

from forecastkit.errors import InvalidTarget

OPEN_METEO_BASE_URL = "https://api.open-meteo.com/v1"
OPEN_METEO_GEOCODING_BASE_URL = "https://geocoding-api.open-meteo.com/v1"
WEATHER_API_BASE_URL = "https://api.weatherapi.com/v1"

OPEN_METEO_CURRENT_FIELDS = (
    "temperature_2m,relative_humidity_2m,apparent_temperature,"
    "weather_code,wind_speed_10m"
)


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything a transport needs to perform one physical attempt."""

    url: httpx.URL
    method: HTTPMethod = HTTPMethod.GET
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))


@dataclass(frozen=True)
class Endpoint:
    """Base address, path, method and ordered query of an API call.

    Query parameters are kept as ``(name, value)`` pairs in the order
    given; repeated names are sent as-is.
    """

    base_url: str
    path: str
    method: HTTPMethod = HTTPMethod.GET
    query: Sequence[tuple[str, str]] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "query", tuple(self.query))

    @property
    def url(self) -> Optional[httpx.URL]:
        """The fully resolved URL, or None if base+path is not usable."""
        raw = self.base_url + self.path
        if not raw:
            return None
        try:
            url = httpx.URL(raw)
        except httpx.InvalidURL:
            return None
        if not url.scheme or not url.host:
            return None
        if self.query:
            # %20 for spaces rather than the form-style "+" of QueryParams
            query = urlencode(self.query, quote_via=quote)
            url = url.copy_with(query=query.encode("ascii"))
        return url

    def build(
        self,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> RequestDescriptor:
        """Resolve into a RequestDescriptor.

        Raises:
            InvalidTarget: base+path do not form an absolute URL.
        """
        url = self.url
        if url is None:
            raise InvalidTarget()
        return RequestDescriptor(
            url=url, method=self.method, headers=headers or {}, timeout=timeout
        )

    # -----------------------------------------------------------------
    # Provider endpoints
    # -----------------------------------------------------------------

    @classmethod
    def open_meteo_forecast(
        cls,
        latitude: float,
        longitude: float,
        *,
        base_url: str = OPEN_METEO_BASE_URL,
    ) -> "Endpoint":
        """GET /forecast -- current conditions at the given coordinates."""
        return cls(
            base_url=base_url,
            path="/forecast",
            query=[
                ("latitude", str(latitude)),
                ("longitude", str(longitude)),
                ("current", OPEN_METEO_CURRENT_FIELDS),
                ("timezone", "auto"),
            ],
        )

    @classmethod
    def open_meteo_geocoding(
        cls,
        name: str,
        *,
        base_url: str = OPEN_METEO_GEOCODING_BASE_URL,
    ) -> "Endpoint":
        """GET /search -- best match for a place name."""
        return cls(
            base_url=base_url,
            path="/search",
            query=[
                ("name", name),
                ("count", "1"),
                ("language", "en"),
                ("format", "json"),
            ],
        )

    @classmethod
    def weather_api_current(
        cls,
        location: str,
        api_key: str,
        *,
        base_url: str = WEATHER_API_BASE_URL,
    ) -> "Endpoint":
        """GET /current.json -- current conditions for a free-text place."""
        return cls(
            base_url=base_url,
            path="/current.json",
            query=[("key", api_key), ("q", location), ("aqi", "no")],
        )
