"""HTTP client for the record store API."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

import httpx

from checkin_tracker.domain.records import ClientInfo, ScanRecord


class RecordStoreClient(Protocol):
    """Interface for record store API interactions."""

    async def create_record(self, payload: dict[str, object]) -> ScanRecord:
        """Create a scan record and return it as stored."""

    async def list_records(
        self,
        filter_type: str | None = None,
        sandbox: str | None = None,
        limit: int | None = None,
    ) -> list[ScanRecord]:
        """Return stored records, newest first."""

    async def get_client_info(self) -> ClientInfo:
        """Return the address and user agent the server sees."""


@dataclass
class HttpxRecordStoreClient(RecordStoreClient):
    """Record store client implemented with httpx."""

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str) -> "HttpxRecordStoreClient":
        """Create a client with a managed httpx session."""
        return cls(base_url=base_url.rstrip("/"), http_client=httpx.AsyncClient())

    async def create_record(self, payload: dict[str, object]) -> ScanRecord:
        """POST a scan record."""
        url = f"{self.base_url}/api/scan-records"
        response = await self.http_client.post(url, json=payload, timeout=10)
        response.raise_for_status()
        return parse_record(response.json())

    async def list_records(
        self,
        filter_type: str | None = None,
        sandbox: str | None = None,
        limit: int | None = None,
    ) -> list[ScanRecord]:
        """GET scan records with optional filters."""
        params: dict[str, str | int] = {}
        if filter_type:
            params["filter"] = filter_type
        if sandbox:
            params["sandbox"] = sandbox
        if limit:
            params["limit"] = limit
        url = f"{self.base_url}/api/scan-records"
        response = await self.http_client.get(url, params=params, timeout=10)
        response.raise_for_status()
        return [parse_record(row) for row in response.json()]

    async def get_client_info(self) -> ClientInfo:
        """GET the caller's address as seen by the server."""
        url = f"{self.base_url}/api/client-info"
        response = await self.http_client.get(url, timeout=10)
        response.raise_for_status()
        data = response.json()
        return ClientInfo(
            ip=str(data.get("ip", "unknown")),
            user_agent=str(data.get("userAgent", "unknown")),
        )

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()


def parse_record(data: dict[str, object]) -> ScanRecord:
    """Build a ScanRecord from the API's camelCase JSON."""
    timestamp = datetime.fromisoformat(str(data["timestamp"]))
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return ScanRecord(
        id=int(data["id"]),
        uid=str(data["uid"]),
        sandbox=str(data["sandbox"]),
        timestamp=timestamp,
        success=bool(data.get("success", True)),
        device_info=data.get("deviceInfo"),
        user_agent=data.get("userAgent"),
        ip_address=data.get("ipAddress"),
        username=data.get("username"),
    )
