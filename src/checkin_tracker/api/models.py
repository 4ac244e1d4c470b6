"""Pydantic models for the record store API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model using camelCase JSON keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ScanRecordCreate(CamelModel):
    """Request body for creating a scan record.

    ipAddress is accepted for compatibility but the server records the
    caller's own address.
    """

    uid: str = Field(min_length=1, max_length=32)
    sandbox: str = Field(min_length=1, max_length=100)
    device_info: str | None = Field(default=None, max_length=255)
    user_agent: str | None = Field(default=None, max_length=512)
    ip_address: str | None = None
    username: str | None = Field(default=None, max_length=100)


class ScanRecordOut(CamelModel):
    """A stored scan record."""

    id: int
    uid: str
    sandbox: str
    device_info: str | None = None
    user_agent: str | None = None
    ip_address: str | None = None
    username: str | None = None
    timestamp: datetime
    success: bool


class ClientInfoOut(CamelModel):
    """Caller provenance as seen by the server."""

    ip: str
    user_agent: str


class SandboxOut(CamelModel):
    tag: str
    name: str


class WindowPointOut(CamelModel):
    time: str
    last_5min: int = Field(alias="last5min")
    last_10min: int = Field(alias="last10min")
    last_30min: int = Field(alias="last30min")


class HourlyCountOut(CamelModel):
    hour: str
    count: int


class SandboxCountOut(CamelModel):
    tag: str
    name: str
    count: int
    is_hottest: bool


class UserCountOut(CamelModel):
    username: str
    count: int


class DashboardOut(CamelModel):
    """Dashboard aggregates."""

    total_scans: int
    last_5min: int = Field(alias="last5min")
    last_10min: int = Field(alias="last10min")
    last_30min: int = Field(alias="last30min")
    time_series: list[WindowPointOut]
    hourly: list[HourlyCountOut]
    sandboxes: list[SandboxCountOut]
    users: list[UserCountOut]
