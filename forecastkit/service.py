"""Caller-facing entry point: weather for a place name from a chosen provider."""

from __future__ import annotations

import logging
from typing import Optional, Union

from forecastkit.client import NetworkClient
from forecastkit.config import Settings
from forecastkit.errors import InvalidTarget
from forecastkit.geocoding import OpenMeteoGeocoder
from forecastkit.models import Location, WeatherRecord
from forecastkit.providers import (
    OpenMeteoProvider,
    ProviderMap,
    ProviderType,
    WeatherAPIProvider,
    WeatherProvider,
)
from forecastkit.transport import Transport

logger = logging.getLogger(__name__)


class WeatherService:
    """Dispatches lookups to the selected provider adapter.

    Usage:
        async with HttpxTransport() as transport:
            service = WeatherService.from_settings(Settings(), transport)
            record = await service.fetch_weather("Lisbon", ProviderType.OPEN_METEO)
    """

    def __init__(self, providers: ProviderMap) -> None:
        self._providers = dict(providers)

    @property
    def available_providers(self) -> list[ProviderType]:
        return [p for p in ProviderType if p in self._providers]

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Transport,
        *,
        client: Optional[NetworkClient] = None,
    ) -> "WeatherService":
        """Wire both providers over ``transport`` from configuration.

        WeatherAPI.com is only registered when an API key is configured.
        """
        client = client or NetworkClient(transport, retry_policy=settings.retry_policy())
        headers = {"Accept": "application/json", "User-Agent": settings.user_agent}
        geocoder = OpenMeteoGeocoder(
            client,
            base_url=settings.geocoding_base_url,
            headers=headers,
            timeout=settings.http_timeout_s,
        )
        providers: dict[ProviderType, WeatherProvider] = {
            ProviderType.OPEN_METEO: OpenMeteoProvider(
                client,
                geocoder,
                base_url=settings.open_meteo_base_url,
                timeout=settings.http_timeout_s,
                user_agent=settings.user_agent,
            ),
        }
        if settings.weather_api_key:
            providers[ProviderType.WEATHER_API] = WeatherAPIProvider(
                client,
                settings.weather_api_key,
                base_url=settings.weather_api_base_url,
                timeout=settings.http_timeout_s,
                user_agent=settings.user_agent,
            )
        else:
            logger.debug("No WeatherAPI.com key configured; provider disabled")
        return cls(providers)

    async def fetch_weather(
        self,
        location_name: str,
        provider: Union[ProviderType, str] = ProviderType.OPEN_METEO,
    ) -> WeatherRecord:
        """Fetch current conditions for ``location_name``.

        Raises:
            InvalidTarget: the name is not a valid location, or the
                provider is unknown or not configured.
            NetworkError: the provider lookup failed.
        """
        error = Location.validation_error(location_name)
        if error is not None:
            logger.warning("Rejected location %r: %s", location_name, error)
            raise InvalidTarget(error)
        location = Location(name=location_name)

        try:
            provider_type = ProviderType(provider)
        except ValueError:
            raise InvalidTarget(f"Unknown weather provider: {provider}") from None
        adapter = self._providers.get(provider_type)
        if adapter is None:
            raise InvalidTarget(f"Weather provider not configured: {provider_type.value}")

        logger.info("Fetching weather for %s from %s", location.name, adapter.name)
        record = await adapter.fetch(location)
        logger.info(
            "%s: %s, %s", record.location, record.temperature_text, record.description
        )
        return record
