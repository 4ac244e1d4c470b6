"""Domain models for scan records."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class NewScanRecord:
    """Payload for a scan record before the store assigns id and timestamp."""

    uid: str
    sandbox: str
    device_info: str | None = None
    user_agent: str | None = None
    ip_address: str | None = None
    username: str | None = None


@dataclass(frozen=True)
class ScanRecord:
    """Represents a persisted scan record."""

    id: int
    uid: str
    sandbox: str
    timestamp: datetime
    success: bool = True
    device_info: str | None = None
    user_agent: str | None = None
    ip_address: str | None = None
    username: str | None = None


@dataclass(frozen=True)
class ClientInfo:
    """Provenance details the server sees for the caller."""

    ip: str
    user_agent: str


class UidValidationError(ValueError):
    """Raised when a UID does not match the canonical format."""


class SandboxNotAllowedError(ValueError):
    """Raised when a sandbox tag is not in the configured allow-list."""


class SubmissionError(RuntimeError):
    """Raised when the record store rejects or fails a submission."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
