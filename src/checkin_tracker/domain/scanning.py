"""Domain types for camera scanning sessions."""

from dataclasses import dataclass
from enum import Enum


class ScanState(str, Enum):
    """Lifecycle states of a scan session."""

    IDLE = "IDLE"
    ACQUIRING_DEVICE = "ACQUIRING_DEVICE"
    SCANNING = "SCANNING"
    DETECTED = "DETECTED"
    FAILED = "FAILED"
    STOPPED = "STOPPED"


@dataclass(frozen=True)
class CaptureConstraints:
    """Requested camera settings. The platform may substitute others."""

    facing_mode: str = "environment"
    ideal_width: int = 640
    ideal_height: int = 480
    device_index: int = 0


class DeviceError(Exception):
    """Camera acquisition failure with no more specific classification."""


class DeviceUnsupportedError(DeviceError):
    """The platform has no capture capability."""


class DevicePermissionDeniedError(DeviceError):
    """Access to the camera was refused."""


class DeviceNotFoundError(DeviceError):
    """No camera matches the requested constraints."""


class DecodeEngineError(Exception):
    """The barcode decoding engine could not be initialized or failed."""


@dataclass(frozen=True)
class Detected:
    """A decode attempt found a barcode."""

    code: str


@dataclass(frozen=True)
class Miss:
    """A decode attempt found nothing. Not an error."""


@dataclass(frozen=True)
class FatalError:
    """A decode attempt hit an unrecoverable engine error."""

    error: DecodeEngineError


ScanOutcome = Detected | Miss | FatalError
