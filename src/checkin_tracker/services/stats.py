"""Dashboard aggregation over fetched scan records."""

from collections import Counter
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, tzinfo

from checkin_tracker.domain.records import ScanRecord
from checkin_tracker.domain.sandboxes import sandbox_display_name
from checkin_tracker.domain.stats import (
    DashboardStats,
    HourlyCount,
    SandboxCount,
    UserCount,
    WindowPoint,
)

SERIES_POINTS = 13
SERIES_STEP = timedelta(minutes=30)
HOURS_IN_DAY = 24
TOP_USERS = 10
UNKNOWN_USER = "unknown"


@dataclass
class DashboardService:
    """Computes dashboard figures from a list of records.

    Pure aggregation; fetching is the caller's job.
    """

    timezone: tzinfo = UTC

    def compute(
        self,
        records: list[ScanRecord],
        now: datetime | None = None,
        sandbox: str | None = None,
    ) -> DashboardStats:
        """Aggregate records, optionally narrowed to one sandbox.

        The sandbox distribution always covers every record so the hottest
        sandbox can be flagged.
        """
        current = (now or datetime.now(tz=UTC)).astimezone(self.timezone)
        scoped = (
            [record for record in records if record.sandbox == sandbox]
            if sandbox
            else list(records)
        )
        return DashboardStats(
            total_scans=len(scoped),
            last_5min=_count_window(scoped, current, timedelta(minutes=5)),
            last_10min=_count_window(scoped, current, timedelta(minutes=10)),
            last_30min=_count_window(scoped, current, timedelta(minutes=30)),
            time_series=self._time_series(scoped, current),
            hourly=self._hourly(scoped, current),
            sandboxes=_sandbox_counts(records),
            users=_user_counts(scoped),
        )

    def _time_series(
        self, records: list[ScanRecord], now: datetime
    ) -> list[WindowPoint]:
        points = []
        for step in range(SERIES_POINTS - 1, -1, -1):
            point = now - step * SERIES_STEP
            points.append(
                WindowPoint(
                    time=point.strftime("%H:%M"),
                    last_5min=_count_window(records, point, timedelta(minutes=5)),
                    last_10min=_count_window(records, point, timedelta(minutes=10)),
                    last_30min=_count_window(records, point, timedelta(minutes=30)),
                )
            )
        return points

    def _hourly(self, records: list[ScanRecord], now: datetime) -> list[HourlyCount]:
        buckets: dict[str, int] = {}
        for offset in range(HOURS_IN_DAY - 1, -1, -1):
            hour = now - timedelta(hours=offset)
            buckets[f"{hour.hour:02d}:00"] = 0
        since = now - timedelta(hours=HOURS_IN_DAY)
        for record in records:
            local = record.timestamp.astimezone(self.timezone)
            if local > since:
                key = f"{local.hour:02d}:00"
                buckets[key] = buckets.get(key, 0) + 1
        return [HourlyCount(hour=hour, count=count) for hour, count in buckets.items()]


def _count_window(records: list[ScanRecord], end: datetime, width: timedelta) -> int:
    """Count records in the half-open window (end - width, end]."""
    start = end - width
    return sum(1 for record in records if start < record.timestamp <= end)


def _sandbox_counts(records: list[ScanRecord]) -> list[SandboxCount]:
    counts = Counter(record.sandbox for record in records)
    ranked = counts.most_common()
    hottest = ranked[0][0] if ranked else None
    return [
        SandboxCount(
            tag=tag,
            name=sandbox_display_name(tag),
            count=count,
            is_hottest=tag == hottest,
        )
        for tag, count in ranked
    ]


def _user_counts(records: list[ScanRecord]) -> list[UserCount]:
    counts = Counter(record.username or UNKNOWN_USER for record in records)
    return [
        UserCount(username=username, count=count)
        for username, count in counts.most_common(TOP_USERS)
    ]
