"""One check-in surface: camera scanning plus manual entry for a sandbox."""

from dataclasses import dataclass, field
from types import TracebackType

from checkin_tracker.domain.records import ScanRecord
from checkin_tracker.domain.sandboxes import sandbox_display_name
from checkin_tracker.domain.scanning import ScanState
from checkin_tracker.services.checkin import CheckinForm, Notice
from checkin_tracker.services.history import RecordHistory
from checkin_tracker.services.records import FILTER_SANDBOX
from checkin_tracker.services.scan_session import ScanSessionController
from checkin_tracker.services.uids import UidValidation


@dataclass
class KioskSession:
    """Wires the scanner into the entry form.

    Manual entry never depends on the camera, so it stays usable whatever
    state the scanner ends in.
    """

    sandbox: str
    controller: ScanSessionController
    form: CheckinForm
    history: RecordHistory
    scan_message: str | None = None
    notices: list[Notice] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.controller.on_detected = self._on_detected
        self.controller.on_error = self._on_scan_error

    @property
    def sandbox_name(self) -> str:
        """Display name of the kiosk's sandbox."""
        return sandbox_display_name(self.sandbox)

    @property
    def scan_state(self) -> ScanState:
        """State of the camera scanner."""
        return self.controller.state

    async def start_scan(self) -> None:
        """Open the camera and look for a barcode."""
        self.scan_message = None
        await self.controller.start()

    def stop_scan(self) -> None:
        """Close the camera."""
        self.controller.stop()

    def enter_uid(self, raw: str) -> UidValidation:
        """Manual entry."""
        return self.form.set_uid(raw)

    async def submit(self) -> Notice | None:
        """Submit the current UID and keep the resulting notice."""
        notice = await self.form.submit()
        if notice is not None:
            self.notices.append(notice)
        return notice

    async def recent_records(self, limit: int | None = None) -> list[ScanRecord]:
        """Recent check-ins for this sandbox."""
        return await self.history.list_records(
            filter_type=FILTER_SANDBOX, sandbox=self.sandbox, limit=limit
        )

    async def __aenter__(self) -> "KioskSession":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.controller.stop()

    def _on_detected(self, code: str) -> None:
        self.scan_message = None
        self.form.handle_detected(code)

    def _on_scan_error(self, message: str) -> None:
        self.scan_message = message
