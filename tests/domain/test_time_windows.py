from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from binsight.domain.time_windows import Clock, TimeWindow, parse_timestamp


def _make_clock(reference: datetime) -> Clock:
    def _clock() -> datetime:
        return reference

    return _clock


NOW = datetime(2025, 1, 1, 12, tzinfo=UTC)


def test_empty_window_covers_the_default_lookback() -> None:
    start, end = TimeWindow().resolve(clock=_make_clock(NOW))

    assert start == NOW - TimeWindow.DEFAULT_LOOKBACK
    assert end == NOW


def test_time_window_with_lookback_produces_start_and_end() -> None:
    window = TimeWindow(lookback=timedelta(hours=6))

    start, end = window.resolve(clock=_make_clock(NOW))

    assert start == datetime(2025, 1, 1, 6, tzinfo=UTC)
    assert end == NOW


def test_explicit_start_without_lookback_runs_until_now() -> None:
    start = datetime(2024, 12, 1, tzinfo=UTC)

    resolved_start, resolved_end = TimeWindow(start=start).resolve(clock=_make_clock(NOW))

    assert resolved_start == start
    assert resolved_end == NOW


def test_time_window_combines_start_and_lookback() -> None:
    start = datetime(2025, 1, 1, 9, tzinfo=UTC)
    window = TimeWindow(start=start, lookback=timedelta(hours=6))

    resolved_start, _ = window.resolve(clock=_make_clock(NOW))

    assert resolved_start == start


def test_time_window_with_end_and_lookback_anchors_to_end() -> None:
    end = datetime(2025, 2, 1, tzinfo=UTC)
    window = TimeWindow(end=end, lookback=timedelta(days=2))

    resolved_start, resolved_end = window.resolve()

    assert resolved_start == datetime(2025, 1, 30, tzinfo=UTC)
    assert resolved_end == end


def test_time_window_rejects_naive_datetimes() -> None:
    with pytest.raises(ValueError, match="timezone"):
        TimeWindow(start=datetime(2025, 1, 1, 12))  # noqa: DTZ001


def test_time_window_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError, match="before end"):
        TimeWindow(start=NOW, end=NOW - timedelta(hours=1))


def test_start_after_now_cannot_be_resolved() -> None:
    window = TimeWindow(start=NOW + timedelta(hours=1))

    with pytest.raises(ValueError, match="before end"):
        window.resolve(clock=_make_clock(NOW))


def test_time_window_rejects_negative_lookback() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        TimeWindow(lookback=timedelta(hours=-1))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2025-01-02T00:00:00Z", datetime(2025, 1, 2, tzinfo=UTC)),
        ("2025-01-01T03:00:00+03:00", datetime(2025, 1, 1, tzinfo=UTC)),
        ("2025-01-01 12:30", datetime(2025, 1, 1, 12, 30, tzinfo=UTC)),
    ],
)
def test_parse_timestamp_normalises_to_utc(value: str, expected: datetime) -> None:
    assert parse_timestamp(value) == expected


def test_parse_timestamp_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        parse_timestamp("not-a-date")
