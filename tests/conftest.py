"""Shared test fixtures."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import pytest

from checkin_tracker.adapters.memory_record_repository import (
    InMemoryScanRecordRepository,
)
from checkin_tracker.config import Settings
from checkin_tracker.containers import AppContainer
from checkin_tracker.domain.records import ClientInfo, ScanRecord
from checkin_tracker.domain.scanning import CaptureConstraints
from checkin_tracker.services.capture import CaptureDeviceManager, DeviceHandle
from checkin_tracker.services.decode_loop import DecoderProvider, FrameDecodeLoop
from checkin_tracker.services.records import FILTER_SANDBOX, ScanRecordService
from checkin_tracker.services.scan_session import ScanSessionController
from checkin_tracker.services.stats import DashboardService


@dataclass(eq=False)
class FakeStream:
    """Camera stream that yields a placeholder frame until closed."""

    width: int = 640
    height: int = 480
    frame: object = "frame"
    close_calls: int = 0

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    async def read(self) -> object | None:
        return None if self.closed else self.frame

    def close(self) -> None:
        self.close_calls += 1


@dataclass
class FakeCameraBackend:
    """Camera backend with an optional failure and an optional gate."""

    error: Exception | None = None
    gate: asyncio.Event | None = None
    width: int = 640
    height: int = 480
    streams: list[FakeStream] = field(default_factory=list)
    open_calls: int = 0
    opening: int = 0
    max_opening: int = 0

    async def open(self, constraints: CaptureConstraints) -> FakeStream:
        self.open_calls += 1
        self.opening += 1
        self.max_opening = max(self.max_opening, self.opening)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.error is not None:
                raise self.error
        finally:
            self.opening -= 1
        stream = FakeStream(width=self.width, height=self.height)
        self.streams.append(stream)
        return stream


@dataclass
class FakeDecoder:
    """Decoder returning scripted results, then a default."""

    results: list[object] = field(default_factory=list)
    default: str | None = None
    gate: asyncio.Event | None = None
    calls: int = 0
    in_flight: int = 0
    max_in_flight_seen: int = 0

    async def decode(self, frame: object) -> str | None:
        self.calls += 1
        self.in_flight += 1
        self.max_in_flight_seen = max(self.max_in_flight_seen, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            result = self.results.pop(0) if self.results else self.default
            if isinstance(result, Exception):
                raise result
            return result
        finally:
            self.in_flight -= 1


@dataclass
class FakeDecoderLoader:
    """Async loader that hands out a decoder or fails."""

    decoder: FakeDecoder = field(default_factory=FakeDecoder)
    error: Exception | None = None
    loads: int = 0

    async def __call__(self) -> FakeDecoder:
        self.loads += 1
        if self.error is not None:
            raise self.error
        return self.decoder


@dataclass
class FakePreview:
    """Preview surface recording attach/clear calls."""

    events: list[str] = field(default_factory=list)

    def attach(self, device: DeviceHandle) -> None:
        self.events.append("attach")

    def clear(self) -> None:
        self.events.append("clear")


@dataclass
class FakeRecordStoreClient:
    """In-memory record store client."""

    records: list[ScanRecord] = field(default_factory=list)
    payloads: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None
    gate: asyncio.Event | None = None
    list_calls: int = 0

    async def create_record(self, payload: dict[str, object]) -> ScanRecord:
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        self.payloads.append(payload)
        record = ScanRecord(
            id=len(self.records) + 1,
            uid=str(payload["uid"]),
            sandbox=str(payload["sandbox"]),
            timestamp=datetime.now(tz=UTC),
            device_info=payload.get("deviceInfo"),
            user_agent=payload.get("userAgent"),
            username=payload.get("username"),
        )
        self.records.append(record)
        return record

    async def list_records(
        self,
        filter_type: str | None = None,
        sandbox: str | None = None,
        limit: int | None = None,
    ) -> list[ScanRecord]:
        self.list_calls += 1
        records = list(reversed(self.records))
        if filter_type == FILTER_SANDBOX and sandbox:
            records = [record for record in records if record.sandbox == sandbox]
        return records[:limit] if limit else records

    async def get_client_info(self) -> ClientInfo:
        return ClientInfo(ip="127.0.0.1", user_agent="pytest")


def build_controller(
    backend: FakeCameraBackend,
    loader: FakeDecoderLoader,
    preview: FakePreview | None = None,
    max_in_flight: int = 2,
) -> ScanSessionController:
    """Controller over fakes with a fast decode interval."""
    return ScanSessionController(
        devices=CaptureDeviceManager(backend),
        decode_loop=FrameDecodeLoop(
            decoders=DecoderProvider(loader),
            interval_seconds=0.001,
            max_in_flight=max_in_flight,
        ),
        preview=preview,
    )


async def wait_for(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    """Yield to the event loop until predicate holds."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        record_store="memory",
        supabase_url=None,
        supabase_service_key=None,
        allowed_sandboxes=None,
        preferences_path=str(tmp_path / "kiosk.json"),
    )


@pytest.fixture
def repository() -> InMemoryScanRecordRepository:
    return InMemoryScanRecordRepository()


@pytest.fixture
def container(
    settings: Settings, repository: InMemoryScanRecordRepository
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        record_service=ScanRecordService(repository),
        dashboard_service=DashboardService(),
        close_resources=close_resources,
    )
