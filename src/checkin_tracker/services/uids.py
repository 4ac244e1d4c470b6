"""UID format validation."""

import re
from dataclasses import dataclass

UID_DIGITS = 3
UID_PATTERN = re.compile(rf"^[A-Za-z]\d{{{UID_DIGITS}}}$")
UID_EXAMPLE = "A123"

FORMAT_HINT = f"Format: one letter followed by {UID_DIGITS} digits (e.g. {UID_EXAMPLE})"
VALID_MESSAGE = "UID format is valid"
INVALID_MESSAGE = (
    f"Invalid UID format. Enter one letter followed by {UID_DIGITS} digits"
)


@dataclass(frozen=True)
class UidValidation:
    """Result of checking a UID against the canonical format."""

    valid: bool
    is_empty: bool
    message: str


def normalize_uid(raw: str) -> str:
    """Normalize manual or scanned input the same way."""
    return raw.strip().upper()


def is_valid_uid(raw: str) -> bool:
    """Return true when the input matches the canonical UID format."""
    # `$` alone would accept a trailing newline.
    return UID_PATTERN.fullmatch(raw) is not None


def validate_uid(raw: str) -> UidValidation:
    """Validate a UID and return a user-facing status message."""
    if raw == "":
        return UidValidation(valid=False, is_empty=True, message=FORMAT_HINT)
    valid = is_valid_uid(raw)
    return UidValidation(
        valid=valid,
        is_empty=False,
        message=VALID_MESSAGE if valid else INVALID_MESSAGE,
    )
