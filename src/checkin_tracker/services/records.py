"""Scan record creation and listing for the record store API."""

import logging
from dataclasses import dataclass, replace
from typing import Protocol

from checkin_tracker.domain.records import (
    NewScanRecord,
    SandboxNotAllowedError,
    ScanRecord,
    UidValidationError,
)
from checkin_tracker.services.device_info import describe_user_agent
from checkin_tracker.services.uids import INVALID_MESSAGE, is_valid_uid

DEFAULT_LIMIT = 50
FILTER_MY_SCANS = "my-scans"
FILTER_SANDBOX = "sandbox"

logger = logging.getLogger(__name__)


class ScanRecordRepository(Protocol):
    """Persistence interface for scan records."""

    def create_record(self, record: NewScanRecord) -> ScanRecord:
        """Persist a record, assigning id, timestamp and success."""

    def list_recent(self, limit: int) -> list[ScanRecord]:
        """Return the most recent records, newest first."""

    def list_by_sandbox(self, sandbox: str, limit: int) -> list[ScanRecord]:
        """Return the most recent records for a sandbox, newest first."""

    def list_by_ip(self, ip_address: str, limit: int) -> list[ScanRecord]:
        """Return the most recent records submitted from an IP, newest first."""


@dataclass
class ScanRecordService:
    """Validates and stores scan records, and answers list queries."""

    repository: ScanRecordRepository
    allowed_sandboxes: set[str] | None = None

    def create_record(self, record: NewScanRecord) -> ScanRecord:
        """Validate a submission and persist it."""
        if not is_valid_uid(record.uid):
            raise UidValidationError(INVALID_MESSAGE)
        sandbox = record.sandbox.strip()
        if not sandbox:
            raise SandboxNotAllowedError("Sandbox is required")
        if self.allowed_sandboxes is not None and sandbox not in self.allowed_sandboxes:
            raise SandboxNotAllowedError(f"Unknown sandbox: {sandbox}")
        device_info = record.device_info or (
            describe_user_agent(record.user_agent) if record.user_agent else None
        )
        created = self.repository.create_record(
            replace(
                record,
                uid=record.uid.upper(),
                sandbox=sandbox,
                device_info=device_info,
            )
        )
        logger.info(
            "Scan recorded",
            extra={"record_id": created.id, "sandbox": created.sandbox},
        )
        return created

    def list_records(
        self,
        filter_type: str | None = None,
        sandbox: str | None = None,
        ip_address: str | None = None,
        limit: int | None = None,
    ) -> list[ScanRecord]:
        """Return records, optionally scoped to the caller IP or a sandbox.

        The IP scope is a convenience filter only; callers behind one NAT
        share an address.
        """
        resolved_limit = limit if limit and limit > 0 else DEFAULT_LIMIT
        if filter_type == FILTER_MY_SCANS and ip_address:
            return self.repository.list_by_ip(ip_address, resolved_limit)
        if filter_type == FILTER_SANDBOX and sandbox:
            return self.repository.list_by_sandbox(sandbox, resolved_limit)
        return self.repository.list_recent(resolved_limit)
