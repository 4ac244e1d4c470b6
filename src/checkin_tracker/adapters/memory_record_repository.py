"""Process-local scan record repository."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from itertools import count

from checkin_tracker.domain.records import NewScanRecord, ScanRecord
from checkin_tracker.services.records import ScanRecordRepository


@dataclass
class InMemoryScanRecordRepository(ScanRecordRepository):
    """Keeps records in a dict; contents are lost on restart."""

    records: dict[int, ScanRecord] = field(default_factory=dict)
    _ids: count = field(default_factory=lambda: count(1), repr=False)

    def create_record(self, record: NewScanRecord) -> ScanRecord:
        """Store a record with a sequential id and the current time."""
        created = ScanRecord(
            id=next(self._ids),
            uid=record.uid,
            sandbox=record.sandbox,
            timestamp=datetime.now(tz=UTC),
            success=True,
            device_info=record.device_info,
            user_agent=record.user_agent,
            ip_address=record.ip_address,
            username=record.username,
        )
        self.records[created.id] = created
        return created

    def list_recent(self, limit: int) -> list[ScanRecord]:
        """Return the newest records."""
        return self._newest_first(self.records.values())[:limit]

    def list_by_sandbox(self, sandbox: str, limit: int) -> list[ScanRecord]:
        """Return the newest records for one sandbox."""
        matching = [r for r in self.records.values() if r.sandbox == sandbox]
        return self._newest_first(matching)[:limit]

    def list_by_ip(self, ip_address: str, limit: int) -> list[ScanRecord]:
        """Return the newest records submitted from one address."""
        matching = [r for r in self.records.values() if r.ip_address == ip_address]
        return self._newest_first(matching)[:limit]

    @staticmethod
    def _newest_first(records: Iterable[ScanRecord]) -> list[ScanRecord]:
        # id breaks ties between records created within one clock tick
        return sorted(records, key=lambda r: (r.timestamp, r.id), reverse=True)
