"""UID entry form state for a check-in surface."""

import logging
from dataclasses import dataclass, field

from checkin_tracker.domain.records import ScanRecord, SubmissionError
from checkin_tracker.services.history import RecordHistory
from checkin_tracker.services.submission import RecordSubmissionClient
from checkin_tracker.services.uids import UidValidation, normalize_uid, validate_uid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    """A transient message shown after a submission."""

    success: bool
    title: str
    description: str
    record: ScanRecord | None = None


@dataclass
class CheckinForm:
    """Holds the UID input, its validation and the submit trigger."""

    sandbox: str
    submitter: RecordSubmissionClient
    history: RecordHistory
    uid: str = ""
    validation: UidValidation = field(default_factory=lambda: validate_uid(""))
    submitting: bool = False

    def set_uid(self, raw: str) -> UidValidation:
        """Replace the input and re-validate it."""
        self.uid = normalize_uid(raw)
        self.validation = validate_uid(self.uid)
        return self.validation

    def handle_detected(self, code: str) -> UidValidation:
        """Take a code from the scanner as if it had been typed."""
        return self.set_uid(code)

    @property
    def can_submit(self) -> bool:
        """True when the input is valid and no submission is in flight."""
        return self.validation.valid and not self.submitting

    async def submit(self) -> Notice | None:
        """Submit the current UID; returns None when submitting is not allowed.

        On success cached record lists are dropped and the input is cleared,
        unless a new code was entered while the request was in flight.
        On failure the input is kept so the user can retry.
        """
        if not self.can_submit:
            return None
        submitted_uid = self.uid
        self.submitting = True
        try:
            record = await self.submitter.submit(submitted_uid, self.sandbox)
        except SubmissionError as exc:
            logger.warning(
                "Check-in submission failed",
                extra={"sandbox": self.sandbox, "status_code": exc.status_code},
            )
            return Notice(
                success=False,
                title="Submission failed",
                description=str(exc) or "Please try again later",
            )
        finally:
            self.submitting = False
        # keep a code scanned while the request was in flight
        if self.uid == submitted_uid:
            self.set_uid("")
        self.history.invalidate()
        return Notice(
            success=True,
            title="Check-in recorded",
            description=f"UID {record.uid} recorded",
            record=record,
        )
