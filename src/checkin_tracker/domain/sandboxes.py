"""Sandbox (venue or zone) catalogue."""

from collections.abc import Iterable
from dataclasses import dataclass

DEFAULT_SANDBOX_NAMES: dict[str, str] = {
    "notebook-lm": "Notebook LM Night Market Tour",
    "vertex-ai": "Vertex AI Night Market Impressions",
    "google-gemini": "Google Gemini Night Market Snacks",
    "ai-marketing": "AI for Marketing Goldfish Stall",
    "vigenair": "ViGenAiR",
    "videomate": "VideoMate",
    "feedgen": "FeedGen",
    "advatars": "Advatars",
}


@dataclass(frozen=True)
class Sandbox:
    """A sandbox tag with its display name."""

    tag: str
    name: str


def sandbox_display_name(tag: str) -> str:
    """Return the display name for a sandbox tag, or the tag itself."""
    return DEFAULT_SANDBOX_NAMES.get(tag, tag)


def sandbox_catalogue(tags: Iterable[str] | None = None) -> list[Sandbox]:
    """Return sandboxes for the given tags, or the default catalogue."""
    selected = DEFAULT_SANDBOX_NAMES if tags is None else tags
    return [Sandbox(tag=tag, name=sandbox_display_name(tag)) for tag in selected]
