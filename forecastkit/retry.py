"""Exponential backoff policy for transient HTTP and transport errors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from forecastkit.errors import TransportErrorKind

JITTER_MIN = 0.1
JITTER_MAX = 0.3

_DEFAULT_STATUSES = frozenset({408, 429, 500, 502, 503, 504})
_DEFAULT_KINDS = frozenset(
    {
        TransportErrorKind.NO_CONNECTIVITY,
        TransportErrorKind.CONNECTION_LOST,
        TransportErrorKind.TIMED_OUT,
        TransportErrorKind.CANNOT_CONNECT_HOST,
    }
)


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for exponential backoff retry."""

    max_retries: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    backoff_multiplier: float = 2.0
    retryable_status_codes: frozenset[int] = field(default=_DEFAULT_STATUSES)
    retryable_transport_errors: frozenset[TransportErrorKind] = field(
        default=_DEFAULT_KINDS
    )

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.base_delay < 0:
            raise ValueError("base_delay must be non-negative")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if self.backoff_multiplier < 1.0:
            raise ValueError("backoff_multiplier must be >= 1.0")
        # Accept any iterable of codes/kinds but store them frozen.
        object.__setattr__(
            self, "retryable_status_codes", frozenset(self.retryable_status_codes)
        )
        object.__setattr__(
            self,
            "retryable_transport_errors",
            frozenset(TransportErrorKind(k) for k in self.retryable_transport_errors),
        )

    @classmethod
    def default(cls) -> "RetryPolicy":
        return cls()

    @classmethod
    def aggressive(cls) -> "RetryPolicy":
        return cls(
            max_retries=5,
            base_delay=0.5,
            max_delay=60.0,
            backoff_multiplier=1.5,
            retryable_status_codes=_DEFAULT_STATUSES | {520, 521, 522, 523, 524},
            retryable_transport_errors=_DEFAULT_KINDS
            | {TransportErrorKind.DNS_LOOKUP_FAILED},
        )

    @classmethod
    def disabled(cls) -> "RetryPolicy":
        return cls(
            max_retries=0,
            base_delay=0.0,
            max_delay=0.0,
            backoff_multiplier=1.0,
            retryable_status_codes=frozenset(),
            retryable_transport_errors=frozenset(),
        )

    @classmethod
    def from_name(cls, name: str) -> "RetryPolicy":
        """Resolve one of the presets ("default", "aggressive", "disabled")."""
        presets = {
            "default": cls.default,
            "aggressive": cls.aggressive,
            "disabled": cls.disabled,
        }
        try:
            return presets[name.strip().lower()]()
        except KeyError:
            raise ValueError(
                f"Unknown retry preset {name!r}; expected one of {sorted(presets)}"
            ) from None

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def get_delay(self, attempt: int, jitter: float = 0.0) -> float:
        """Calculate the delay after the given failed attempt (0-indexed).

        ``jitter`` is a fraction added on top of the exponential delay;
        the result is capped at ``max_delay``.
        """
        delay = self.base_delay * (self.backoff_multiplier**attempt) * (1 + jitter)
        return min(delay, self.max_delay)

    def is_retryable_status(self, status_code: int) -> bool:
        """Check if the given HTTP status code is retryable."""
        return status_code in self.retryable_status_codes

    def is_retryable_transport_error(self, kind: TransportErrorKind) -> bool:
        return kind in self.retryable_transport_errors


def resolve_policy(policy: Optional[RetryPolicy]) -> RetryPolicy:
    """Return ``policy``, or the default preset when none was given."""
    return policy if policy is not None else RetryPolicy.default()
