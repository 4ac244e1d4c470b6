"""Tests for record submission."""

import asyncio

import httpx
import pytest

from checkin_tracker.adapters.record_store_client import HttpxRecordStoreClient
from checkin_tracker.domain.records import SubmissionError, UidValidationError
from checkin_tracker.services.submission import RecordSubmissionClient
from tests.conftest import FakeRecordStoreClient


def _httpx_store(handler) -> HttpxRecordStoreClient:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return HttpxRecordStoreClient(
        base_url="https://records.test",
        http_client=httpx.AsyncClient(transport=transport),
    )


def test_invalid_uid_never_reaches_store() -> None:
    store = FakeRecordStoreClient()
    client = RecordSubmissionClient(store=store)

    with pytest.raises(UidValidationError):
        asyncio.run(client.submit("12AB", "zone-1"))

    assert store.payloads == []


def test_submit_sends_normalized_payload() -> None:
    store = FakeRecordStoreClient()
    client = RecordSubmissionClient(
        store=store, device_info="Linux 6.1", user_agent="kiosk", username="user-7"
    )

    record = asyncio.run(client.submit(" a123 ", "zone-1"))

    assert record.uid == "A123"
    assert store.payloads == [
        {
            "uid": "A123",
            "sandbox": "zone-1",
            "deviceInfo": "Linux 6.1",
            "userAgent": "kiosk",
            "username": "user-7",
        }
    ]


def test_server_rejection_carries_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"message": "Unknown sandbox: zone-9"})

    client = RecordSubmissionClient(store=_httpx_store(handler))

    with pytest.raises(SubmissionError) as exc_info:
        asyncio.run(client.submit("A123", "zone-9"))

    assert str(exc_info.value) == "Unknown sandbox: zone-9"
    assert exc_info.value.status_code == 400


def test_server_error_without_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    client = RecordSubmissionClient(store=_httpx_store(handler))

    with pytest.raises(SubmissionError, match="HTTP 502"):
        asyncio.run(client.submit("A123", "zone-1"))


def test_network_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = RecordSubmissionClient(store=_httpx_store(handler))

    with pytest.raises(SubmissionError, match="Could not reach"):
        asyncio.run(client.submit("A123", "zone-1"))
