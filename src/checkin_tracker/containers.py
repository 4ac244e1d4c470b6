"""Dependency container wiring for the API and for kiosk surfaces."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from supabase import create_client

from checkin_tracker.adapters.json_preferences import (
    JsonPreferenceStore,
    KioskPreferences,
)
from checkin_tracker.adapters.memory_record_repository import (
    InMemoryScanRecordRepository,
)
from checkin_tracker.adapters.opencv_camera import OpenCvCameraBackend
from checkin_tracker.adapters.pyzbar_decoder import load_pyzbar_decoder
from checkin_tracker.adapters.record_store_client import (
    HttpxRecordStoreClient,
    RecordStoreClient,
)
from checkin_tracker.adapters.supabase_record_repository import (
    SupabaseScanRecordRepository,
)
from checkin_tracker.config import (
    Settings,
    parse_allowed_sandboxes,
    parse_symbologies,
)
from checkin_tracker.domain.scanning import CaptureConstraints
from checkin_tracker.services.cache import InMemoryCache
from checkin_tracker.services.capture import CameraBackend, CaptureDeviceManager
from checkin_tracker.services.checkin import CheckinForm
from checkin_tracker.services.decode_loop import (
    Decoder,
    DecoderProvider,
    FrameDecodeLoop,
)
from checkin_tracker.services.device_info import describe_host
from checkin_tracker.services.history import RecordHistory
from checkin_tracker.services.kiosk import KioskSession
from checkin_tracker.services.records import ScanRecordRepository, ScanRecordService
from checkin_tracker.services.scan_session import PreviewSurface, ScanSessionController
from checkin_tracker.services.stats import DashboardService
from checkin_tracker.services.submission import RecordSubmissionClient

KIOSK_USER_AGENT = "checkin-tracker-kiosk"


@dataclass
class AppContainer:
    """Holds API-wide dependencies."""

    settings: Settings
    record_service: ScanRecordService
    dashboard_service: DashboardService
    close_resources: Callable[[], Awaitable[None]]


@dataclass
class KioskContainer:
    """Holds the dependencies of one kiosk surface."""

    settings: Settings
    preferences: KioskPreferences
    store_client: RecordStoreClient
    kiosk: KioskSession
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default API dependency container."""
    resolved_settings = settings or Settings()
    record_service = ScanRecordService(
        repository=_build_repository(resolved_settings),
        allowed_sandboxes=parse_allowed_sandboxes(resolved_settings.allowed_sandboxes),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=resolved_settings,
        record_service=record_service,
        dashboard_service=DashboardService(),
        close_resources=close_resources,
    )


def build_kiosk_container(  # noqa: PLR0913
    settings: Settings | None = None,
    sandbox: str | None = None,
    camera_backend: CameraBackend | None = None,
    decoder_loader: Callable[[], Awaitable[Decoder]] | None = None,
    store_client: RecordStoreClient | None = None,
    preview: PreviewSurface | None = None,
) -> KioskContainer:
    """Create the dependencies for a kiosk bound to one sandbox.

    The sandbox falls back to the one saved in the kiosk preferences.
    """
    resolved_settings = settings or Settings()
    preference_store = JsonPreferenceStore(Path(resolved_settings.preferences_path))
    preferences = preference_store.load()
    resolved_sandbox = sandbox or preferences.sandbox
    if not resolved_sandbox:
        raise ValueError("A sandbox is required to start a kiosk")
    if resolved_sandbox != preferences.sandbox:
        preferences = preference_store.set_sandbox(resolved_sandbox)

    owned_client: HttpxRecordStoreClient | None = None
    if store_client is None:
        owned_client = HttpxRecordStoreClient.create(resolved_settings.api_base_url)
        store_client = owned_client

    loader = decoder_loader or partial(
        load_pyzbar_decoder, parse_symbologies(resolved_settings.decoder_symbologies)
    )
    controller = ScanSessionController(
        devices=CaptureDeviceManager(camera_backend or OpenCvCameraBackend()),
        decode_loop=FrameDecodeLoop(
            decoders=DecoderProvider(loader),
            interval_seconds=resolved_settings.scan_interval_ms / 1000,
            max_in_flight=resolved_settings.scan_max_in_flight,
        ),
        constraints=CaptureConstraints(
            facing_mode=resolved_settings.camera_facing_mode,
            ideal_width=resolved_settings.camera_width,
            ideal_height=resolved_settings.camera_height,
            device_index=resolved_settings.camera_device_index,
        ),
        preview=preview,
    )
    history = RecordHistory(
        store=store_client,
        cache=InMemoryCache(),
        ttl_seconds=resolved_settings.history_ttl_seconds,
        limit=resolved_settings.history_limit,
    )
    submitter = RecordSubmissionClient(
        store=store_client,
        device_info=describe_host(),
        user_agent=KIOSK_USER_AGENT,
        username=preferences.username,
    )
    kiosk = KioskSession(
        sandbox=resolved_sandbox,
        controller=controller,
        form=CheckinForm(
            sandbox=resolved_sandbox, submitter=submitter, history=history
        ),
        history=history,
    )

    async def close_resources() -> None:
        kiosk.stop_scan()
        if owned_client is not None:
            await owned_client.close()

    return KioskContainer(
        settings=resolved_settings,
        preferences=preferences,
        store_client=store_client,
        kiosk=kiosk,
        close_resources=close_resources,
    )


def _build_repository(settings: Settings) -> ScanRecordRepository:
    if settings.record_store == "memory":
        return InMemoryScanRecordRepository()
    if settings.record_store == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required for the "
                "supabase record store"
            )
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseScanRecordRepository(client)
    raise ValueError(f"Unknown record store: {settings.record_store}")
