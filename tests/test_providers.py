"""Provider adapter and geocoder tests."""

import pytest
from unittest.mock import AsyncMock, patch

from forecastkit.client import NetworkClient
from forecastkit.errors import (
    GeocodingError,
    HttpError,
    InvalidResponse,
    LocationNotFound,
    NetworkUnavailable,
    TransportError,
    TransportErrorKind,
)
from forecastkit.geocoding import OpenMeteoGeocoder
from forecastkit.models import Coordinates, Location
from forecastkit.providers import (
    OpenMeteoProvider,
    ProviderType,
    WeatherAPIProvider,
    describe_weather_code,
)
from forecastkit.retry import RetryPolicy

from tests.conftest import (
    FIXED_NOW,
    GEOCODING_LISBON,
    OPEN_METEO_FORECAST,
    WEATHER_API_CURRENT,
    ScriptedTransport,
    json_response,
)

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
WEATHER_API_URL = "https://api.weatherapi.com/v1/current.json"


class StaticGeocoder:
    def __init__(self, coordinates=None, error=None):
        self.coordinates = coordinates
        self.error = error
        self.names = []

    async def resolve(self, name: str) -> Coordinates:
        self.names.append(name)
        if self.error is not None:
            raise self.error
        return self.coordinates


class TestWeatherCodes:
    @pytest.mark.parametrize(
        "code, text",
        [
            (0, "Clear sky"),
            (1, "Mainly clear"),
            (2, "Partly cloudy"),
            (3, "Overcast"),
            (45, "Fog"),
            (48, "Fog"),
            (53, "Drizzle"),
            (57, "Freezing drizzle"),
            (65, "Rain"),
            (66, "Freezing rain"),
            (73, "Snow fall"),
            (77, "Snow grains"),
            (81, "Rain showers"),
            (86, "Snow showers"),
            (95, "Thunderstorm"),
            (96, "Thunderstorm with hail"),
            (99, "Thunderstorm with hail"),
        ],
    )
    def test_known_codes(self, code, text):
        assert describe_weather_code(code) == text

    @pytest.mark.parametrize("code", [4, 50, 98, 100, -1])
    def test_unknown_codes(self, code):
        assert describe_weather_code(code) == "Unknown"


class TestOpenMeteoProvider:
    async def test_maps_forecast_to_record(self):
        transport = ScriptedTransport({FORECAST_URL: [json_response(200, OPEN_METEO_FORECAST)]})
        geocoder = StaticGeocoder(Coordinates(latitude=38.72, longitude=-9.14))
        provider = OpenMeteoProvider(NetworkClient(transport), geocoder, clock=lambda: FIXED_NOW)

        record = await provider.fetch(Location(name="Lisbon"))

        assert record.location == "Lisbon"
        assert record.temperature == 21.4
        assert record.feels_like == 20.9
        assert record.humidity == 65
        assert record.description == "Rain"
        assert record.wind_speed == 10.0  # 36 km/h
        assert record.provider == "Open-Meteo"
        assert record.timestamp == FIXED_NOW
        assert geocoder.names == ["Lisbon"]

        sent = transport.requests[0]
        assert sent.url.params["latitude"] == "38.72"
        assert sent.url.params["longitude"] == "-9.14"
        assert sent.headers["Accept"] == "application/json"
        assert sent.timeout == 30.0

    async def test_geocoding_failure_is_invalid_response_without_request(self):
        transport = ScriptedTransport({FORECAST_URL: [json_response(200, OPEN_METEO_FORECAST)]})
        geocoder = StaticGeocoder(error=LocationNotFound("Atlantis"))
        provider = OpenMeteoProvider(NetworkClient(transport), geocoder)

        with pytest.raises(InvalidResponse) as exc_info:
            await provider.fetch(Location(name="Atlantis"))

        assert isinstance(exc_info.value.__cause__, LocationNotFound)
        assert transport.total_calls == 0

    @patch("forecastkit.client.asyncio.sleep", new_callable=AsyncMock)
    async def test_forecast_failure_retried_by_default(self, mock_sleep):
        transport = ScriptedTransport({FORECAST_URL: [json_response(503, {})]})
        geocoder = StaticGeocoder(Coordinates(latitude=0.0, longitude=0.0))
        provider = OpenMeteoProvider(NetworkClient(transport), geocoder)

        with pytest.raises(HttpError):
            await provider.fetch(Location(name="Null Island"))

        assert transport.calls[FORECAST_URL] == 4
        assert geocoder.names == ["Null Island"]


class TestWeatherAPIProvider:
    async def test_maps_current_to_record(self):
        transport = ScriptedTransport({WEATHER_API_URL: [json_response(200, WEATHER_API_CURRENT)]})
        provider = WeatherAPIProvider(NetworkClient(transport), "k3y", clock=lambda: FIXED_NOW)

        record = await provider.fetch(Location(name="London"))

        assert record.location == "London"
        assert record.temperature == 14.0
        assert record.feels_like == 12.5
        assert record.humidity == 82
        assert record.description == "Light rain"
        assert record.wind_speed == pytest.approx(5.0)
        assert record.provider == "WeatherAPI.com"
        assert record.timestamp == FIXED_NOW

        params = transport.requests[0].url.params
        assert params["key"] == "k3y"
        assert params["q"] == "London"
        assert params["aqi"] == "no"

    async def test_custom_policy_used(self):
        transport = ScriptedTransport({WEATHER_API_URL: [json_response(500, {})]})
        provider = WeatherAPIProvider(
            NetworkClient(transport), "k3y", retry_policy=RetryPolicy.disabled()
        )

        with pytest.raises(HttpError):
            await provider.fetch(Location(name="London"))
        assert transport.calls[WEATHER_API_URL] == 1

    def test_display_names(self):
        assert ProviderType.OPEN_METEO.display_name == "Open-Meteo"
        assert ProviderType.WEATHER_API.display_name == "WeatherAPI.com"


class TestOpenMeteoGeocoder:
    async def test_resolves_first_result(self):
        transport = ScriptedTransport({GEOCODING_URL: [json_response(200, GEOCODING_LISBON)]})
        geocoder = OpenMeteoGeocoder(NetworkClient(transport))

        coordinates = await geocoder.resolve("Lisbon")

        assert coordinates == Coordinates(latitude=38.71667, longitude=-9.13333)
        assert transport.requests[0].url.params["name"] == "Lisbon"

    async def test_no_results_is_location_not_found(self):
        transport = ScriptedTransport({GEOCODING_URL: [json_response(200, {})]})
        geocoder = OpenMeteoGeocoder(NetworkClient(transport))

        with pytest.raises(LocationNotFound):
            await geocoder.resolve("Atlantis")

    async def test_network_failure_not_retried(self):
        transport = ScriptedTransport(
            {GEOCODING_URL: [TransportError(TransportErrorKind.TIMED_OUT), json_response(200, GEOCODING_LISBON)]}
        )
        geocoder = OpenMeteoGeocoder(NetworkClient(transport, retry_policy=RetryPolicy.aggressive()))

        with pytest.raises(GeocodingError) as exc_info:
            await geocoder.resolve("Lisbon")

        assert not isinstance(exc_info.value, LocationNotFound)
        assert transport.calls[GEOCODING_URL] == 1

    async def test_open_meteo_end_to_end_geocoding_failure(self):
        transport = ScriptedTransport(
            {
                GEOCODING_URL: [TransportError(TransportErrorKind.NO_CONNECTIVITY)],
                FORECAST_URL: [json_response(200, OPEN_METEO_FORECAST)],
            }
        )
        client = NetworkClient(transport)
        provider = OpenMeteoProvider(client, OpenMeteoGeocoder(client))

        with pytest.raises(InvalidResponse) as exc_info:
            await provider.fetch(Location(name="Lisbon"))

        assert not isinstance(exc_info.value, NetworkUnavailable)
        assert transport.calls[GEOCODING_URL] == 1
        assert transport.calls[FORECAST_URL] == 0
