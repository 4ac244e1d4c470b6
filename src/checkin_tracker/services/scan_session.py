"""Scan session state machine tying camera, decode loop and listeners."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial
from types import TracebackType
from typing import Protocol

from checkin_tracker.domain.scanning import (
    CaptureConstraints,
    DecodeEngineError,
    DeviceError,
    DeviceNotFoundError,
    DevicePermissionDeniedError,
    DeviceUnsupportedError,
    ScanState,
)
from checkin_tracker.services.capture import CaptureDeviceManager, DeviceHandle
from checkin_tracker.services.decode_loop import FrameDecodeLoop, LoopHandle
from checkin_tracker.services.uids import normalize_uid

logger = logging.getLogger(__name__)

_BUSY_STATES = {ScanState.ACQUIRING_DEVICE, ScanState.SCANNING}


class PreviewSurface(Protocol):
    """Where the live camera picture is shown."""

    def attach(self, device: DeviceHandle) -> None:
        """Start showing frames from the device."""

    def clear(self) -> None:
        """Remove the picture."""


@dataclass
class ScanSession:
    """State of one scan attempt."""

    state: ScanState = ScanState.IDLE
    device: DeviceHandle | None = None
    loop: LoopHandle | None = None
    last_error: Exception | None = None
    detected_code: str | None = None


@dataclass
class ScanSessionController:
    """Drives one scan surface through acquire, scan and teardown.

    Each controller owns its session exclusively; nothing is shared between
    controllers. Teardown always runs in the same order: cancel the decode
    loop, release the camera, clear the preview.
    """

    devices: CaptureDeviceManager
    decode_loop: FrameDecodeLoop
    constraints: CaptureConstraints = field(default_factory=CaptureConstraints)
    preview: PreviewSurface | None = None
    on_detected: Callable[[str], None] | None = None
    on_error: Callable[[str], None] | None = None
    on_state_change: Callable[[ScanState], None] | None = None
    session: ScanSession = field(default_factory=ScanSession, init=False)
    _acquiring: "asyncio.Future[DeviceHandle] | None" = field(
        default=None, init=False, repr=False
    )

    @property
    def state(self) -> ScanState:
        """Current session state."""
        return self.session.state

    async def start(self) -> None:
        """Acquire the camera and begin decoding. Ignored while busy."""
        if self.session.state in _BUSY_STATES:
            return
        session = ScanSession()
        self.session = session
        self._transition(session, ScanState.ACQUIRING_DEVICE)
        abandoned = self._acquiring
        if abandoned is not None and not abandoned.done():
            # a stopped session's open is still pending; let it settle first
            await asyncio.wait([abandoned])
            if not self._is_current(session, ScanState.ACQUIRING_DEVICE):
                return
        acquiring = asyncio.ensure_future(self.devices.acquire(self.constraints))
        self._acquiring = acquiring
        try:
            device = await acquiring
        except DeviceError as exc:
            if self._is_current(session, ScanState.ACQUIRING_DEVICE):
                self._fail(session, exc)
            else:
                logger.info("Ignoring camera error for a stopped session: %s", exc)
            return
        if not self._is_current(session, ScanState.ACQUIRING_DEVICE):
            # stopped while the permission prompt was open
            self.devices.release(device)
            return
        session.device = device
        if self.preview is not None:
            self.preview.attach(device)
        self._transition(session, ScanState.SCANNING)
        session.loop = self.decode_loop.start_loop(
            device,
            on_detected=partial(self._handle_detected, session),
            on_error=partial(self._handle_engine_error, session),
        )

    def stop(self) -> None:
        """Tear down and settle in STOPPED. Does nothing while idle."""
        session = self.session
        if session.state is ScanState.IDLE:
            return
        self._teardown(session)
        if session.state is not ScanState.STOPPED:
            self._transition(session, ScanState.STOPPED)

    async def __aenter__(self) -> "ScanSessionController":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()

    def _handle_detected(self, session: ScanSession, code: str) -> None:
        if not self._is_current(session, ScanState.SCANNING):
            return
        normalized = normalize_uid(code)
        session.detected_code = normalized
        self._transition(session, ScanState.DETECTED)
        self._teardown(session)
        self._transition(session, ScanState.STOPPED)
        logger.info("Barcode detected", extra={"code": normalized})
        if self.on_detected is not None:
            self.on_detected(normalized)

    def _handle_engine_error(
        self, session: ScanSession, error: DecodeEngineError
    ) -> None:
        if not self._is_current(session, ScanState.SCANNING):
            return
        self._fail(session, error)

    def _fail(self, session: ScanSession, error: Exception) -> None:
        session.last_error = error
        self._teardown(session)
        self._transition(session, ScanState.FAILED)
        logger.warning("Scan session failed: %s", error)
        if self.on_error is not None:
            self.on_error(describe_scan_error(error))

    def _teardown(self, session: ScanSession) -> None:
        if session.loop is not None:
            self.decode_loop.cancel(session.loop)
            session.loop = None
        if session.device is not None:
            self.devices.release(session.device)
            session.device = None
        if self.preview is not None:
            self.preview.clear()

    def _is_current(self, session: ScanSession, state: ScanState) -> bool:
        return session is self.session and session.state is state

    def _transition(self, session: ScanSession, state: ScanState) -> None:
        logger.debug("Scan state %s -> %s", session.state.value, state.value)
        session.state = state
        if self.on_state_change is not None:
            self.on_state_change(state)


def describe_scan_error(error: Exception) -> str:
    """Return a user-facing message with a next step for a scan failure."""
    if isinstance(error, DeviceUnsupportedError):
        return (
            "This device cannot use a camera for scanning. "
            "Enter the UID manually instead."
        )
    if isinstance(error, DevicePermissionDeniedError):
        return (
            "Camera permission was refused. Allow camera access and try again, "
            "or enter the UID manually."
        )
    if isinstance(error, DeviceNotFoundError):
        return (
            "No camera was found. Try another device or enter the UID manually."
        )
    if isinstance(error, DecodeEngineError):
        return "The barcode scanner failed to load. Enter the UID manually."
    return f"Could not start the camera ({error}). Enter the UID manually."
