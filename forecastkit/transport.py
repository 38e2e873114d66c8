"""Transport port: the byte-level HTTP call beneath the retrying client."""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol

import httpx

from forecastkit.endpoint import RequestDescriptor
from forecastkit.errors import TransportError, TransportErrorKind

logger = logging.getLogger(__name__)

__all__ = [
    "HttpxTransport",
    "Transport",
    "TransportError",
    "TransportErrorKind",
    "TransportResponse",
    "classify_httpx_error",
]


@dataclass(frozen=True)
class TransportResponse:
    """Raw result of one physical attempt."""

    content: bytes
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code <= 299


class Transport(Protocol):
    async def send(self, descriptor: RequestDescriptor) -> TransportResponse:
        """Perform one HTTP exchange.

        Raises:
            TransportError: no HTTP response was obtained.
        """
        ...


def _caused_by_dns_failure(exc: BaseException) -> bool:
    seen: set[int] = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, socket.gaierror):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


def classify_httpx_error(exc: httpx.HTTPError) -> TransportErrorKind:
    """Map an httpx exception onto a transport error kind."""
    if isinstance(exc, httpx.TimeoutException):
        return TransportErrorKind.TIMED_OUT
    if isinstance(exc, httpx.ConnectError):
        if _caused_by_dns_failure(exc):
            return TransportErrorKind.DNS_LOOKUP_FAILED
        return TransportErrorKind.CANNOT_CONNECT_HOST
    if isinstance(exc, httpx.ProxyError):
        return TransportErrorKind.CANNOT_CONNECT_HOST
    if isinstance(
        exc,
        (httpx.ReadError, httpx.WriteError, httpx.CloseError, httpx.RemoteProtocolError),
    ):
        return TransportErrorKind.CONNECTION_LOST
    if isinstance(exc, httpx.TooManyRedirects):
        return TransportErrorKind.TOO_MANY_REDIRECTS
    if isinstance(exc, httpx.UnsupportedProtocol):
        return TransportErrorKind.UNSUPPORTED_URL
    return TransportErrorKind.UNKNOWN


class HttpxTransport:
    """Transport backed by an ``httpx.AsyncClient``.

    Usage:
        async with HttpxTransport(timeout=30.0) as transport:
            client = NetworkClient(transport)
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        headers: Optional[Mapping[str, str]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout,
            headers=dict(headers or {}),
        )

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def send(self, descriptor: RequestDescriptor) -> TransportResponse:
        timeout = descriptor.timeout if descriptor.timeout is not None else self._timeout
        try:
            response = await self._client.request(
                descriptor.method.value,
                descriptor.url,
                headers=dict(descriptor.headers),
                timeout=timeout,
            )
        except httpx.HTTPError as exc:
            kind = classify_httpx_error(exc)
            logger.debug("Transport failure for %s: %s (%s)", descriptor.url, kind.value, exc)
            raise TransportError(kind, str(exc)) from exc
        return TransportResponse(
            content=response.content,
            status_code=response.status_code,
            headers=dict(response.headers),
        )
