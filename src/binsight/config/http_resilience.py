"""Retry and rate-limit settings for outbound HTTP calls."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

import httpx

from .env import env_float, env_int, env_str
from .errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_RETRY_TOTAL: Final[int] = 3
RETRYABLE_STATUSES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """How often and how patiently a failed GET is repeated."""

    total: int = DEFAULT_RETRY_TOTAL
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0
    backoff_jitter: float = 1.0
    status_forcelist: frozenset[int] = RETRYABLE_STATUSES
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )

    def __post_init__(self) -> None:
        if self.total < 0:
            raise ConfigurationError("Retry total must be non-negative")
        if self.backoff_factor < 0 or self.max_backoff_wait < 0:
            raise ConfigurationError("Retry backoff must be non-negative")


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float

    @classmethod
    def parse(cls, value: str) -> RateLimit:
        """Parse ``calls/seconds``, e.g. ``10/1`` for ten calls per second."""

        calls, sep, seconds = value.partition("/")
        try:
            limit = cls(max_calls=int(calls), per_seconds=float(seconds) if sep else 1.0)
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid rate limit {value!r}; expected 'calls/seconds'"
            ) from exc
        if limit.max_calls < 1 or limit.per_seconds <= 0:
            raise ConfigurationError(f"Rate limit {value!r} must be positive")
        return limit


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None


def resilience_from_env(
    name: str,
    *,
    prefix: str,
    base_url: str | None = None,
    headers: Mapping[str, str] | None = None,
    default_timeout: float = 30.0,
    default_ratelimit: RateLimit | None = None,
) -> ResilienceConfig:
    """Read ``<prefix>_TIMEOUT``, ``<prefix>_MAX_RETRIES`` and ``<prefix>_RATE_LIMIT``."""

    raw_limit = env_str(f"{prefix}_RATE_LIMIT")
    return ResilienceConfig(
        name=name,
        base_url=base_url,
        timeout_seconds=env_float(f"{prefix}_TIMEOUT", default_timeout) or default_timeout,
        retry=RetryPolicy(total=env_int(f"{prefix}_MAX_RETRIES", DEFAULT_RETRY_TOTAL)),
        ratelimit=RateLimit.parse(raw_limit) if raw_limit else default_ratelimit,
        default_headers=headers,
    )
