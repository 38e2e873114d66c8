"""forecastkit -- current weather lookups over a retrying HTTP client."""

from forecastkit.client import NetworkClient, NetworkRequest
from forecastkit.config import Settings
from forecastkit.endpoint import Endpoint, HTTPMethod, RequestDescriptor
from forecastkit.errors import (
    DecodingError,
    GeocodingError,
    HttpError,
    InvalidResponse,
    InvalidTarget,
    LocationNotFound,
    NetworkError,
    NetworkUnavailable,
    NoData,
    Timeout,
    TransportError,
    TransportErrorKind,
)
from forecastkit.geocoding import Geocoder, OpenMeteoGeocoder
from forecastkit.models import Coordinates, Location, WeatherRecord
from forecastkit.providers import (
    OpenMeteoProvider,
    ProviderType,
    WeatherAPIProvider,
    WeatherProvider,
)
from forecastkit.retry import RetryPolicy
from forecastkit.service import WeatherService
from forecastkit.transport import HttpxTransport, Transport, TransportResponse

__version__ = "0.1.0"

__all__ = [
    "NetworkClient",
    "NetworkRequest",
    "Settings",
    "Endpoint",
    "HTTPMethod",
    "RequestDescriptor",
    "NetworkError",
    "InvalidTarget",
    "InvalidResponse",
    "HttpError",
    "DecodingError",
    "NoData",
    "Timeout",
    "NetworkUnavailable",
    "TransportError",
    "TransportErrorKind",
    "GeocodingError",
    "LocationNotFound",
    "Geocoder",
    "OpenMeteoGeocoder",
    "Coordinates",
    "Location",
    "WeatherRecord",
    "WeatherProvider",
    "OpenMeteoProvider",
    "WeatherAPIProvider",
    "ProviderType",
    "RetryPolicy",
    "WeatherService",
    "HttpxTransport",
    "Transport",
    "TransportResponse",
]
