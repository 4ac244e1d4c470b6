"""Record store API endpoints."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Query, Request, status

from checkin_tracker.api.models import (
    ClientInfoOut,
    DashboardOut,
    SandboxOut,
    ScanRecordCreate,
    ScanRecordOut,
)
from checkin_tracker.config import parse_allowed_sandboxes
from checkin_tracker.domain.records import (
    NewScanRecord,
    SandboxNotAllowedError,
    UidValidationError,
)
from checkin_tracker.domain.sandboxes import sandbox_catalogue

if TYPE_CHECKING:
    from checkin_tracker.containers import AppContainer

router = APIRouter(prefix="/api", tags=["records"])
logger = logging.getLogger(__name__)

DASHBOARD_LIMIT = 1000


class ApiError(Exception):
    """An error rendered as {"message": ...} with a status code."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def client_ip(request: Request) -> str:
    """Return the caller address, preferring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


@router.post("/scan-records")
async def create_scan_record(
    payload: ScanRecordCreate, request: Request
) -> ScanRecordOut:
    """Store a check-in."""
    container: AppContainer = request.app.state.container
    record = NewScanRecord(
        uid=payload.uid,
        sandbox=payload.sandbox,
        device_info=payload.device_info,
        user_agent=payload.user_agent or request.headers.get("user-agent"),
        ip_address=client_ip(request),
        username=payload.username,
    )
    try:
        created = container.record_service.create_record(record)
    except (UidValidationError, SandboxNotAllowedError) as exc:
        raise ApiError(status.HTTP_400_BAD_REQUEST, str(exc)) from exc
    except Exception as exc:
        logger.exception("Failed to create scan record")
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
        ) from exc
    return ScanRecordOut(**asdict(created))


@router.get("/scan-records")
async def list_scan_records(
    request: Request,
    filter_type: str | None = Query(default=None, alias="filter"),
    sandbox: str | None = None,
    limit: int | None = Query(default=None, ge=1, le=DASHBOARD_LIMIT),
) -> list[ScanRecordOut]:
    """Return recent check-ins, newest first."""
    container: AppContainer = request.app.state.container
    try:
        records = container.record_service.list_records(
            filter_type=filter_type,
            sandbox=sandbox,
            ip_address=client_ip(request),
            limit=limit,
        )
    except Exception as exc:
        logger.exception("Failed to list scan records")
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
        ) from exc
    return [ScanRecordOut(**asdict(record)) for record in records]


@router.get("/client-info")
async def client_info(request: Request) -> ClientInfoOut:
    """Return the caller's address and user agent."""
    return ClientInfoOut(
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent", "unknown"),
    )


@router.get("/sandboxes")
async def list_sandboxes(request: Request) -> list[SandboxOut]:
    """Return the sandboxes a kiosk may be bound to."""
    container: AppContainer = request.app.state.container
    allowed = parse_allowed_sandboxes(container.settings.allowed_sandboxes)
    catalogue = sandbox_catalogue(sorted(allowed) if allowed is not None else None)
    return [SandboxOut(**asdict(sandbox)) for sandbox in catalogue]


@router.get("/dashboard")
async def dashboard(request: Request, sandbox: str | None = None) -> DashboardOut:
    """Return dashboard aggregates over the most recent records."""
    container: AppContainer = request.app.state.container
    try:
        records = container.record_service.list_records(limit=DASHBOARD_LIMIT)
    except Exception as exc:
        logger.exception("Failed to load records for dashboard")
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
        ) from exc
    stats = container.dashboard_service.compute(records, sandbox=sandbox)
    return DashboardOut(**asdict(stats))
