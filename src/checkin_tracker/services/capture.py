"""Camera stream acquisition and release."""

import logging
from dataclasses import dataclass
from typing import Protocol

from checkin_tracker.domain.scanning import CaptureConstraints, DeviceError

logger = logging.getLogger(__name__)


class CaptureStream(Protocol):
    """A live camera stream."""

    width: int
    height: int

    async def read(self) -> object | None:
        """Return the next frame, or None when no frame is available."""

    def close(self) -> None:
        """Stop the underlying hardware tracks."""


class CameraBackend(Protocol):
    """Platform capture capability."""

    async def open(self, constraints: CaptureConstraints) -> CaptureStream:
        """Open a stream or raise a DeviceError subclass."""


@dataclass(eq=False)
class DeviceHandle:
    """Exclusive ownership of one acquired stream."""

    stream: CaptureStream
    constraints: CaptureConstraints
    released: bool = False

    async def read_frame(self) -> object | None:
        """Read a frame; a released handle yields nothing."""
        if self.released:
            return None
        return await self.stream.read()


@dataclass
class CaptureDeviceManager:
    """Acquires camera streams and guarantees idempotent release."""

    backend: CameraBackend
    acquired_count: int = 0
    released_count: int = 0

    async def acquire(self, constraints: CaptureConstraints) -> DeviceHandle:
        """Open a camera stream matching the constraints as closely as possible.

        Constraints are advisory: any live stream the backend returns is
        accepted, whatever resolution it negotiated.
        """
        try:
            stream = await self.backend.open(constraints)
        except DeviceError:
            raise
        except Exception as exc:
            raise DeviceError(str(exc) or type(exc).__name__) from exc
        self.acquired_count += 1
        if (stream.width, stream.height) != (
            constraints.ideal_width,
            constraints.ideal_height,
        ):
            logger.info(
                "Camera negotiated %sx%s instead of %sx%s",
                stream.width,
                stream.height,
                constraints.ideal_width,
                constraints.ideal_height,
            )
        return DeviceHandle(stream=stream, constraints=constraints)

    def release(self, handle: DeviceHandle) -> None:
        """Stop the stream behind a handle. Later calls do nothing."""
        if handle.released:
            return
        handle.released = True
        self.released_count += 1
        try:
            handle.stream.close()
        except Exception:
            logger.exception("Failed to close camera stream")

    @property
    def open_handles(self) -> int:
        """Number of handles acquired and not yet released."""
        return self.acquired_count - self.released_count
