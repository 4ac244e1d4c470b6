"""OpenCV camera backend."""

import asyncio
import logging
import os
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path

import cv2
import numpy as np

from checkin_tracker.domain.scanning import (
    CaptureConstraints,
    DeviceError,
    DeviceNotFoundError,
    DevicePermissionDeniedError,
    DeviceUnsupportedError,
)
from checkin_tracker.services.capture import CameraBackend

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class OpenCvCaptureStream:
    """A cv2.VideoCapture with reads moved off the event loop.

    Closing never waits for a read. If a read is in flight when the stream
    is closed, the reading thread releases the capture once its read returns.
    """

    capture: cv2.VideoCapture
    width: int
    height: int
    _read_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _state_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _closed: bool = field(default=False, repr=False)
    _reading: bool = field(default=False, repr=False)

    async def read(self) -> np.ndarray | None:
        """Grab one frame in a worker thread."""
        return await asyncio.to_thread(self._read_blocking)

    def close(self) -> None:
        """Release the capture device, or hand the release to the reader."""
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            if self._reading:
                return
        self.capture.release()

    def _read_blocking(self) -> np.ndarray | None:
        # _read_lock serializes cv2 reads; close() only takes _state_lock
        with self._read_lock:
            with self._state_lock:
                if self._closed:
                    return None
                self._reading = True
            try:
                ok, frame = self.capture.read()
            finally:
                with self._state_lock:
                    self._reading = False
                    closed_meanwhile = self._closed
                if closed_meanwhile:
                    self.capture.release()
        if closed_meanwhile or not ok:
            return None
        return frame


@dataclass
class OpenCvCameraBackend(CameraBackend):
    """Opens local cameras by index through OpenCV.

    OpenCV has no notion of camera facing; the device index picks the camera.
    """

    device_root: Path = Path("/dev")

    async def open(self, constraints: CaptureConstraints) -> OpenCvCaptureStream:
        """Open the camera in a worker thread."""
        return await asyncio.to_thread(self._open_blocking, constraints)

    def _open_blocking(self, constraints: CaptureConstraints) -> OpenCvCaptureStream:
        if not cv2.videoio_registry.getCameraBackends():
            raise DeviceUnsupportedError("OpenCV has no camera backends here")
        index = constraints.device_index
        if sys.platform.startswith("linux"):
            node = self.device_root / f"video{index}"
            if not node.exists():
                raise DeviceNotFoundError(f"No camera device at {node}")
            if not os.access(node, os.R_OK | os.W_OK):
                raise DevicePermissionDeniedError(f"No permission to open {node}")
        try:
            capture = cv2.VideoCapture(index)
        except cv2.error as exc:
            raise DeviceError(f"OpenCV failed to open camera {index}: {exc}") from exc
        if not capture.isOpened():
            capture.release()
            raise DeviceNotFoundError(f"Cannot open camera device {index}")
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.ideal_width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.ideal_height)
        width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        logger.info(
            "Camera %s opened at %sx%s (facing %s requested)",
            index,
            width,
            height,
            constraints.facing_mode,
        )
        return OpenCvCaptureStream(capture=capture, width=width, height=height)
