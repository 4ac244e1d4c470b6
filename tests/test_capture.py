"""Tests for camera acquisition and release."""

import asyncio

import pytest

from checkin_tracker.domain.scanning import (
    CaptureConstraints,
    DeviceError,
    DeviceNotFoundError,
)
from checkin_tracker.services.capture import CaptureDeviceManager
from tests.conftest import FakeCameraBackend


def test_release_is_idempotent() -> None:
    backend = FakeCameraBackend()
    manager = CaptureDeviceManager(backend)

    handle = asyncio.run(manager.acquire(CaptureConstraints()))
    manager.release(handle)
    manager.release(handle)

    assert handle.released
    assert backend.streams[0].close_calls == 1
    assert manager.acquired_count == 1
    assert manager.released_count == 1
    assert manager.open_handles == 0


def test_released_handle_reads_nothing() -> None:
    manager = CaptureDeviceManager(FakeCameraBackend())

    async def scenario() -> tuple[object | None, object | None]:
        handle = await manager.acquire(CaptureConstraints())
        before = await handle.read_frame()
        manager.release(handle)
        return before, await handle.read_frame()

    before, after = asyncio.run(scenario())

    assert before == "frame"
    assert after is None


def test_accepts_different_resolution() -> None:
    manager = CaptureDeviceManager(FakeCameraBackend(width=1280, height=720))

    handle = asyncio.run(manager.acquire(CaptureConstraints()))

    assert (handle.stream.width, handle.stream.height) == (1280, 720)


def test_classified_errors_pass_through() -> None:
    manager = CaptureDeviceManager(FakeCameraBackend(error=DeviceNotFoundError("none")))

    with pytest.raises(DeviceNotFoundError):
        asyncio.run(manager.acquire(CaptureConstraints()))

    assert manager.open_handles == 0


def test_unclassified_errors_become_device_errors() -> None:
    manager = CaptureDeviceManager(FakeCameraBackend(error=RuntimeError("boom")))

    with pytest.raises(DeviceError, match="boom"):
        asyncio.run(manager.acquire(CaptureConstraints()))
