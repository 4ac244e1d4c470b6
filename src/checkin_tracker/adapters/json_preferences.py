"""Kiosk-local preferences kept in a JSON file."""

import logging
import secrets
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

_USERNAME_SPACE = 10000


class KioskPreferences(BaseModel):
    """Display username and preferred sandbox for one kiosk."""

    username: str
    sandbox: str | None = None


def generate_username() -> str:
    """Return a random display name such as user-4821."""
    return f"user-{secrets.randbelow(_USERNAME_SPACE)}"


@dataclass
class JsonPreferenceStore:
    """Reads and writes KioskPreferences at a file path."""

    path: Path

    def load(self) -> KioskPreferences:
        """Load preferences, creating them with a fresh username if missing."""
        if self.path.exists():
            try:
                return KioskPreferences.model_validate_json(self.path.read_text())
            except ValidationError:
                logger.warning(
                    "Preferences file is invalid; regenerating",
                    extra={"path": str(self.path)},
                )
        preferences = KioskPreferences(username=generate_username())
        self.save(preferences)
        return preferences

    def save(self, preferences: KioskPreferences) -> None:
        """Write preferences to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(preferences.model_dump_json(indent=2))

    def set_sandbox(self, sandbox: str) -> KioskPreferences:
        """Remember the preferred sandbox."""
        updated = self.load().model_copy(update={"sandbox": sandbox})
        self.save(updated)
        return updated

    def set_username(self, username: str) -> KioskPreferences:
        """Replace the display username."""
        updated = self.load().model_copy(update={"username": username})
        self.save(updated)
        return updated
