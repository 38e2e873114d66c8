"""Place-name lookup used by providers that need coordinates."""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Protocol

from forecastkit.client import NetworkClient, NetworkRequest
from forecastkit.endpoint import OPEN_METEO_GEOCODING_BASE_URL, Endpoint
from forecastkit.errors import GeocodingError, LocationNotFound, NetworkError
from forecastkit.models import Coordinates, GeocodingResponse
from forecastkit.retry import RetryPolicy

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    async def resolve(self, name: str) -> Coordinates:
        """Resolve a place name.

        Raises:
            LocationNotFound: nothing matched ``name``.
            GeocodingError: the lookup itself failed.
        """
        ...


class OpenMeteoGeocoder:
    """Geocoder backed by the Open-Meteo geocoding search API.

    Lookups are never retried; a failed lookup is reported as
    :class:`GeocodingError` rather than as a network error.
    """

    def __init__(
        self,
        client: NetworkClient,
        *,
        base_url: str = OPEN_METEO_GEOCODING_BASE_URL,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._client = client
        self._base_url = base_url
        self._headers = dict(headers or {})
        self._timeout = timeout

    async def resolve(self, name: str) -> Coordinates:
        request = NetworkRequest(
            endpoint=Endpoint.open_meteo_geocoding(name, base_url=self._base_url),
            response_model=GeocodingResponse,
            headers=self._headers,
            timeout=self._timeout,
        )
        try:
            response = await self._client.request(
                request, retry_policy=RetryPolicy.disabled()
            )
        except NetworkError as exc:
            logger.error("Geocoding lookup for %r failed: %s", name, exc)
            raise GeocodingError(f"Geocoding lookup failed: {exc}") from exc

        if not response.results:
            logger.info("No location found for %r", name)
            raise LocationNotFound(name)
        match = response.results[0]
        logger.debug(
            "Resolved %r to %s (%s, %s)", name, match.name, match.latitude, match.longitude
        )
        return Coordinates(latitude=match.latitude, longitude=match.longitude)
