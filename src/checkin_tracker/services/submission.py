"""Posting validated UIDs to the record store."""

import logging
from dataclasses import dataclass

import httpx

from checkin_tracker.adapters.record_store_client import RecordStoreClient
from checkin_tracker.domain.records import (
    ScanRecord,
    SubmissionError,
    UidValidationError,
)
from checkin_tracker.services.uids import INVALID_MESSAGE, is_valid_uid, normalize_uid

logger = logging.getLogger(__name__)


@dataclass
class RecordSubmissionClient:
    """Sends one check-in to the record store. Never retries on its own."""

    store: RecordStoreClient
    device_info: str | None = None
    user_agent: str | None = None
    username: str | None = None

    async def submit(self, uid: str, sandbox: str) -> ScanRecord:
        """Submit a UID for a sandbox and return the stored record."""
        normalized = normalize_uid(uid)
        if not is_valid_uid(normalized):
            raise UidValidationError(INVALID_MESSAGE)
        payload: dict[str, object] = {"uid": normalized, "sandbox": sandbox}
        if self.device_info:
            payload["deviceInfo"] = self.device_info
        if self.user_agent:
            payload["userAgent"] = self.user_agent
        if self.username:
            payload["username"] = self.username
        try:
            return await self.store.create_record(payload)
        except httpx.HTTPStatusError as exc:
            message = _server_message(exc.response)
            logger.warning(
                "Record store rejected submission",
                extra={"status_code": exc.response.status_code, "sandbox": sandbox},
            )
            raise SubmissionError(
                message, status_code=exc.response.status_code
            ) from exc
        except httpx.HTTPError as exc:
            raise SubmissionError(f"Could not reach the record store: {exc}") from exc
        except (KeyError, ValueError) as exc:
            raise SubmissionError("Unexpected response from the record store") from exc


def _server_message(response: httpx.Response) -> str:
    fallback = f"Record store returned HTTP {response.status_code}"
    try:
        data = response.json()
    except ValueError:
        return fallback
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    return fallback
