"""Retrying network client: one logical request, one or more physical attempts."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from forecastkit.endpoint import Endpoint, RequestDescriptor
from forecastkit.errors import (
    DecodingError,
    HttpError,
    InvalidResponse,
    NoData,
    TransportError,
    map_transport_error,
)
from forecastkit.retry import JITTER_MAX, JITTER_MIN, RetryPolicy, resolve_policy
from forecastkit.transport import Transport, TransportResponse

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_JSON_PREVIEW_CHARS = 200


@dataclass(frozen=True)
class NetworkRequest(Generic[T]):
    """An endpoint together with the model its response decodes into."""

    endpoint: Endpoint
    response_model: Type[T]
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout: Optional[float] = None

    def descriptor(self) -> RequestDescriptor:
        return self.endpoint.build(headers=self.headers, timeout=self.timeout)


class NetworkClient:
    """Executes requests through a transport with retry and error normalization.

    Usage:
        async with HttpxTransport() as transport:
            client = NetworkClient(transport)
            forecast = await client.request(request)

    Every failure leaving :meth:`request` is a
    :class:`~forecastkit.errors.NetworkError`; cancellation propagates
    unchanged.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        retry_policy: Optional[RetryPolicy] = None,
        rng: Optional[random.Random] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> None:
        self._transport = transport
        self._retry_policy = resolve_policy(retry_policy)
        self._rng = rng
        self._sleep = sleep

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    def _jitter(self) -> float:
        draw = self._rng.random() if self._rng is not None else random.random()
        return JITTER_MIN + (JITTER_MAX - JITTER_MIN) * draw

    def backoff_delay(self, attempt: int, policy: RetryPolicy) -> float:
        """Delay to wait after failed attempt ``attempt`` (0-indexed)."""
        return policy.get_delay(attempt, self._jitter())

    async def request(
        self,
        request: NetworkRequest[T],
        *,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> T:
        """Perform ``request`` and decode its body.

        Args:
            request: Endpoint, headers, timeout and response model.
            retry_policy: Overrides the client's policy for this call.

        Returns:
            The decoded response model.

        Raises:
            NetworkError: the request failed terminally.
        """
        policy = retry_policy if retry_policy is not None else self._retry_policy
        descriptor = request.descriptor()
        logger.debug("Request: %s %s", descriptor.method.value, descriptor.url)

        attempt = 0
        while True:
            if attempt > 0:
                logger.debug("Retry attempt %d for %s", attempt, descriptor.url)
            try:
                response = await self._transport.send(descriptor)
            except TransportError as exc:
                if attempt < policy.max_retries and policy.is_retryable_transport_error(
                    exc.kind
                ):
                    await self._backoff(attempt, policy, f"transport error {exc.kind.value}")
                    attempt += 1
                    continue
                mapped = map_transport_error(exc)
                logger.error("Request to %s failed: %r", descriptor.url, exc)
                if mapped is exc:
                    raise
                raise mapped from exc

            logger.debug(
                "Response: %d (%d bytes)", response.status_code, len(response.content)
            )
            if not 100 <= response.status_code <= 599:
                logger.error("Invalid HTTP response status %r", response.status_code)
                raise InvalidResponse()

            if not response.is_success:
                if attempt < policy.max_retries and policy.is_retryable_status(
                    response.status_code
                ):
                    await self._backoff(attempt, policy, f"HTTP {response.status_code}")
                    attempt += 1
                    continue
                logger.error("HTTP error: %d", response.status_code)
                raise HttpError(response.status_code)

            return self._decode(response, request.response_model)

    async def _backoff(self, attempt: int, policy: RetryPolicy, reason: str) -> None:
        delay = self.backoff_delay(attempt, policy)
        logger.warning(
            "Attempt %d/%d failed (%s); retrying in %.2fs",
            attempt + 1,
            policy.max_attempts,
            reason,
            delay,
        )
        sleep = self._sleep or asyncio.sleep
        await sleep(delay)

    @staticmethod
    def _decode(response: TransportResponse, model: Type[T]) -> T:
        if not response.content:
            logger.error("Empty body with status %d", response.status_code)
            raise NoData()
        try:
            return model.model_validate_json(response.content)
        except ValidationError as exc:
            preview = response.content[:_JSON_PREVIEW_CHARS].decode("utf-8", "replace")
            logger.error("Decoding error: %s; body preview: %s", exc, preview)
            raise DecodingError(_validation_detail(exc)) from exc


def _validation_detail(exc: ValidationError) -> str:
    """One-line summary of a pydantic validation error."""
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ())) or "<body>"
        parts.append(f"{loc}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)
