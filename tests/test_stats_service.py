"""Tests for dashboard aggregation."""

from datetime import UTC, datetime, timedelta

from checkin_tracker.domain.records import ScanRecord
from checkin_tracker.services.stats import DashboardService

NOW = datetime(2026, 3, 14, 12, 10, tzinfo=UTC)


def _record(
    record_id: int,
    minutes_ago: float,
    sandbox: str = "vertex-ai",
    username: str | None = "user-1",
) -> ScanRecord:
    return ScanRecord(
        id=record_id,
        uid=f"A{record_id:03d}",
        sandbox=sandbox,
        timestamp=NOW - timedelta(minutes=minutes_ago),
        username=username,
    )


def test_window_counts_are_half_open() -> None:
    records = [
        _record(1, 1),
        _record(2, 5),
        _record(3, 7),
        _record(4, 20),
        _record(5, 120),
    ]

    stats = DashboardService().compute(records, now=NOW)

    assert stats.total_scans == 5
    assert stats.last_5min == 1
    assert stats.last_10min == 3
    assert stats.last_30min == 4


def test_time_series_ends_at_now() -> None:
    records = [_record(1, 1), _record(2, 45)]

    stats = DashboardService().compute(records, now=NOW)

    assert len(stats.time_series) == 13
    assert stats.time_series[-1].time == "12:10"
    assert stats.time_series[0].time == "06:10"
    assert stats.time_series[-1].last_30min == 1
    assert stats.time_series[-2].last_30min == 1


def test_hourly_buckets_cover_last_day() -> None:
    records = [_record(1, 1), _record(2, 120), _record(3, 25 * 60)]

    stats = DashboardService().compute(records, now=NOW)

    assert len(stats.hourly) == 24
    assert stats.hourly[-1].hour == "12:00"
    counts = {bucket.hour: bucket.count for bucket in stats.hourly}
    assert counts["12:00"] == 1
    assert counts["10:00"] == 1
    assert sum(counts.values()) == 2


def test_sandbox_distribution_flags_hottest() -> None:
    records = [
        _record(1, 1, sandbox="vertex-ai"),
        _record(2, 2, sandbox="feedgen"),
        _record(3, 3, sandbox="feedgen"),
    ]

    stats = DashboardService().compute(records, now=NOW, sandbox="vertex-ai")

    assert stats.total_scans == 1
    assert [entry.tag for entry in stats.sandboxes] == ["feedgen", "vertex-ai"]
    assert stats.sandboxes[0].is_hottest
    assert stats.sandboxes[0].name == "FeedGen"
    assert not stats.sandboxes[1].is_hottest


def test_top_users_limited_and_unknown_fallback() -> None:
    records = [
        _record(index, 1, username=f"user-{index}") for index in range(1, 13)
    ]
    records += [_record(20, 1, username=None), _record(21, 2, username=None)]

    stats = DashboardService().compute(records, now=NOW)

    assert len(stats.users) == 10
    assert stats.users[0].username == "unknown"
    assert stats.users[0].count == 2


def test_empty_records() -> None:
    stats = DashboardService().compute([], now=NOW)

    assert stats.total_scans == 0
    assert stats.sandboxes == []
    assert stats.users == []
    assert len(stats.time_series) == 13
