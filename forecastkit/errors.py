"""forecastkit error types: the closed taxonomy surfaced to callers."""

from __future__ import annotations

from enum import Enum
from typing import Any


class TransportErrorKind(str, Enum):
    """Classification of a failed transport call."""

    NO_CONNECTIVITY = "no-connectivity"
    CONNECTION_LOST = "connection-lost"
    TIMED_OUT = "timed-out"
    CANNOT_CONNECT_HOST = "cannot-connect-host"
    CANNOT_FIND_HOST = "cannot-find-host"
    DNS_LOOKUP_FAILED = "dns-lookup-failed"
    TOO_MANY_REDIRECTS = "too-many-redirects"
    UNSUPPORTED_URL = "unsupported-url"
    UNKNOWN = "unknown"


class NetworkError(Exception):
    """Terminal error of a logical request.

    Subclasses form a closed set; two errors compare equal when they are
    of the same class and carry the same payload.
    """

    description = "Network error"

    def __init__(self, description: str | None = None) -> None:
        if description is not None:
            self.description = description
        super().__init__(self.description)

    def _key(self) -> tuple[Any, ...]:
        return ()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NetworkError):
            return NotImplemented
        return type(self) is type(other) and self._key() == other._key()

    def __hash__(self) -> int:
        return hash((type(self), self._key()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class InvalidTarget(NetworkError):
    description = "Invalid URL"


class InvalidResponse(NetworkError):
    description = "Invalid server response"


class NoData(NetworkError):
    description = "No data received"


class Timeout(NetworkError):
    description = "Request timed out"


class NetworkUnavailable(NetworkError):
    description = "Network unavailable"


class HttpError(NetworkError):
    """Non-2xx response that was not (or no longer) retried."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"Server error (code: {status_code})")

    def _key(self) -> tuple[Any, ...]:
        return (self.status_code,)

    def __repr__(self) -> str:
        return f"HttpError(status_code={self.status_code})"


class DecodingError(NetworkError):
    """Response body did not match the expected shape.

    Equality compares the detail text only.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Failed to parse response: {detail}")

    def _key(self) -> tuple[Any, ...]:
        return (self.detail,)

    def __repr__(self) -> str:
        return f"DecodingError(detail={self.detail!r})"


class TransportError(NetworkError):
    """Failure raised by a transport before any HTTP status was received.

    Kinds that are neither timeouts nor connectivity failures reach the
    caller as this error, carrying their own kind.
    """

    def __init__(self, kind: TransportErrorKind, message: str = "") -> None:
        self.kind = kind
        self.message = message
        super().__init__(f"Network request failed ({kind.value})")

    def _key(self) -> tuple[Any, ...]:
        return (self.kind,)

    def __repr__(self) -> str:
        return f"TransportError(kind={self.kind.value!r}, message={self.message!r})"


_UNAVAILABLE_KINDS = frozenset(
    {
        TransportErrorKind.NO_CONNECTIVITY,
        TransportErrorKind.CONNECTION_LOST,
        TransportErrorKind.CANNOT_CONNECT_HOST,
        TransportErrorKind.CANNOT_FIND_HOST,
        TransportErrorKind.DNS_LOOKUP_FAILED,
    }
)


def map_transport_error(error: TransportError) -> NetworkError:
    """Normalize a transport failure into the caller-facing taxonomy."""
    if error.kind is TransportErrorKind.TIMED_OUT:
        return Timeout()
    if error.kind in _UNAVAILABLE_KINDS:
        return NetworkUnavailable()
    return error


class GeocodingError(Exception):
    """Failure of the external place-name lookup."""


class LocationNotFound(GeocodingError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No coordinates found for {name!r}")
