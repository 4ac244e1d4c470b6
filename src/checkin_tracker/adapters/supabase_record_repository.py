"""Supabase-backed scan record repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from checkin_tracker.domain.records import NewScanRecord, ScanRecord
from checkin_tracker.services.records import ScanRecordRepository

_COLUMNS = (
    "id, uid, sandbox, device_info, user_agent, ip_address, username, "
    "timestamp, success"
)


@dataclass
class SupabaseScanRecordRepository(ScanRecordRepository):
    """Supabase implementation for the scan_records table."""

    client: Client

    def create_record(self, record: NewScanRecord) -> ScanRecord:
        """Insert a record row; the database assigns id and timestamp."""
        response = (
            self.client.table("scan_records")
            .insert(
                {
                    "uid": record.uid,
                    "sandbox": record.sandbox,
                    "device_info": record.device_info,
                    "user_agent": record.user_agent,
                    "ip_address": record.ip_address,
                    "username": record.username,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create scan record")
        return _parse_row(response.data[0])

    def list_recent(self, limit: int) -> list[ScanRecord]:
        """Return the newest records."""
        response = (
            self.client.table("scan_records")
            .select(_COLUMNS)
            .order("timestamp", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def list_by_sandbox(self, sandbox: str, limit: int) -> list[ScanRecord]:
        """Return the newest records for one sandbox."""
        response = (
            self.client.table("scan_records")
            .select(_COLUMNS)
            .eq("sandbox", sandbox)
            .order("timestamp", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def list_by_ip(self, ip_address: str, limit: int) -> list[ScanRecord]:
        """Return the newest records submitted from one address."""
        response = (
            self.client.table("scan_records")
            .select(_COLUMNS)
            .eq("ip_address", ip_address)
            .order("timestamp", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, object]) -> ScanRecord:
    timestamp_raw = row.get("timestamp")
    if isinstance(timestamp_raw, datetime):
        timestamp = timestamp_raw
    elif isinstance(timestamp_raw, str) and timestamp_raw:
        timestamp = datetime.fromisoformat(timestamp_raw)
    else:
        raise ValueError(f"Scan record {row.get('id')} has no timestamp")
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return ScanRecord(
        id=int(row["id"]),
        uid=str(row["uid"]),
        sandbox=str(row["sandbox"]),
        timestamp=timestamp,
        success=bool(row.get("success", True)),
        device_info=row.get("device_info"),
        user_agent=row.get("user_agent"),
        ip_address=row.get("ip_address"),
        username=row.get("username"),
    )
