"""Bounds for the notification window of one reconciliation pass."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import ClassVar, Protocol


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing ``Z`` or no offset means UTC."""

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _ensure_aware(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        raise ValueError("Time window values must include timezone information")
    return value.astimezone(UTC)


@dataclass(frozen=True)
class TimeWindow:
    """Describe the notification creation times a pass should cover.

    Without any bound the window ends now and starts ``DEFAULT_LOOKBACK`` earlier.
    With both ``start`` and ``lookback`` the later of the two starts wins.
    """

    start: datetime | None = None
    end: datetime | None = None
    lookback: timedelta | None = None

    DEFAULT_LOOKBACK: ClassVar[timedelta] = timedelta(hours=24)

    def __post_init__(self) -> None:
        start = _ensure_aware(self.start)
        end = _ensure_aware(self.end)
        if self.lookback is not None and self.lookback < timedelta(0):
            raise ValueError("Lookback duration must be non-negative")
        if start is not None and end is not None and start > end:
            raise ValueError("Time window start must be before end")

    def resolve(self, *, clock: Clock = utcnow) -> tuple[datetime, datetime]:
        """Resolve the window into concrete UTC timestamps."""

        end = _ensure_aware(self.end) or clock().astimezone(UTC)
        start = _ensure_aware(self.start)

        lookback = self.lookback
        if lookback is None and start is None:
            lookback = self.DEFAULT_LOOKBACK
        if lookback is not None:
            earliest = end - lookback
            start = earliest if start is None else max(start, earliest)

        if start is None or start > end:
            raise ValueError("Time window start must be before end")
        return start, end


__all__ = ["Clock", "TimeWindow", "parse_timestamp", "utcnow"]
