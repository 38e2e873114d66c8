"""Shared pytest fixtures for forecastkit tests."""

import asyncio
import json
import os
from collections import Counter
from datetime import datetime, timezone
from typing import Union

import httpx
import pytest

from forecastkit.endpoint import RequestDescriptor
from forecastkit.errors import TransportError, TransportErrorKind
from forecastkit.transport import TransportResponse

FIXED_NOW = datetime(2025, 10, 1, 12, 30, 15, 123456, tzinfo=timezone.utc)

OPEN_METEO_FORECAST = {
    "latitude": 38.72,
    "longitude": -9.14,
    "timezone": "Europe/Lisbon",
    "current_units": {"temperature_2m": "°C", "wind_speed_10m": "km/h"},
    "current": {
        "time": "2025-10-01T13:30",
        "interval": 900,
        "temperature_2m": 21.4,
        "relative_humidity_2m": 65,
        "apparent_temperature": 20.9,
        "weather_code": 61,
        "wind_speed_10m": 36.0,
    },
}

WEATHER_API_CURRENT = {
    "location": {"name": "London", "region": "City of London", "country": "UK"},
    "current": {
        "last_updated_epoch": 1759318200,
        "temp_c": 14.0,
        "humidity": 82,
        "feelslike_c": 12.5,
        "wind_kph": 18.0,
        "condition": {"text": "Light rain", "icon": "//cdn/296.png", "code": 1183},
        "short_rad": 120.5,
    },
}

GEOCODING_LISBON = {
    "results": [
        {
            "id": 2267057,
            "name": "Lisbon",
            "latitude": 38.71667,
            "longitude": -9.13333,
            "country": "Portugal",
        }
    ],
    "generationtime_ms": 0.7,
}

Outcome = Union[TransportResponse, TransportError]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep FORECASTKIT_* variables of the host shell out of Settings."""
    for name in list(os.environ):
        if name.startswith("FORECASTKIT_"):
            monkeypatch.delenv(name, raising=False)


def json_response(status_code: int, body) -> TransportResponse:
    """Create a TransportResponse from status and JSON-serializable body."""
    return TransportResponse(
        content=json.dumps(body).encode("utf-8"),
        status_code=status_code,
        headers={"content-type": "application/json"},
    )


def raw_response(status_code: int, content: bytes) -> TransportResponse:
    return TransportResponse(content=content, status_code=status_code)


class ScriptedTransport:
    """Deterministic transport double.

    Maps target URLs (without query string) to a list of outcomes played
    in order; the last outcome repeats once the script runs out. Counts
    calls per target and can delay every call.
    """

    def __init__(self, script: dict[str, list[Outcome]], delay: float = 0.0) -> None:
        self._script = {target: list(outcomes) for target, outcomes in script.items()}
        self.delay = delay
        self.calls: Counter = Counter()
        self.requests: list[RequestDescriptor] = []

    @staticmethod
    def target(descriptor: RequestDescriptor) -> str:
        return str(descriptor.url).split("?")[0]

    async def send(self, descriptor: RequestDescriptor) -> TransportResponse:
        target = self.target(descriptor)
        index = self.calls[target]
        self.calls[target] += 1
        self.requests.append(descriptor)
        if self.delay:
            await asyncio.sleep(self.delay)
        outcomes = self._script.get(target)
        if not outcomes:
            raise TransportError(TransportErrorKind.CANNOT_FIND_HOST, f"unscripted {target}")
        outcome = outcomes[min(index, len(outcomes) - 1)]
        if isinstance(outcome, TransportError):
            raise outcome
        return outcome

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())


def mock_transport(handler):
    """Create httpx.MockTransport from a request handler function."""
    return httpx.MockTransport(handler)
