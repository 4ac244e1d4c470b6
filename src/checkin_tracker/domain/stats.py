"""Domain models for dashboard statistics."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WindowPoint:
    """Scan counts in trailing windows ending at one point in time."""

    time: str
    last_5min: int
    last_10min: int
    last_30min: int


@dataclass(frozen=True)
class HourlyCount:
    """Scan count for one clock hour."""

    hour: str
    count: int


@dataclass(frozen=True)
class SandboxCount:
    """Scan count for one sandbox."""

    tag: str
    name: str
    count: int
    is_hottest: bool


@dataclass(frozen=True)
class UserCount:
    """Scan count for one display username."""

    username: str
    count: int


@dataclass(frozen=True)
class DashboardStats:
    """Aggregated dashboard figures."""

    total_scans: int
    last_5min: int
    last_10min: int
    last_30min: int
    time_series: list[WindowPoint]
    hourly: list[HourlyCount]
    sandboxes: list[SandboxCount]
    users: list[UserCount]
