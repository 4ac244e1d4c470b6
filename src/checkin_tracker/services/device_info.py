"""Human readable device descriptions for scan provenance."""

import platform
import re

_ANDROID_VERSION = re.compile(r"Android\s([0-9.]+)")
_ANDROID_DEVICE = re.compile(r";\s*([^;)]+?)\s*(?:Build/[^)]*)?\)")
_IOS_VERSION = re.compile(r"OS\s([0-9_]+)")
_WINDOWS_VERSION = re.compile(r"Windows NT\s([0-9.]+)")
_MAC_VERSION = re.compile(r"Mac OS X\s([0-9_]+)")


def describe_user_agent(user_agent: str | None) -> str:  # noqa: PLR0911
    """Summarize a browser user agent as platform and version."""
    if not user_agent:
        return "Unknown Device"
    if "Android" in user_agent:
        version = _first_group(_ANDROID_VERSION, user_agent) or "Unknown"
        device = _first_group(_ANDROID_DEVICE, user_agent) or "Android Device"
        return f"Android {version} - {device}"
    if "iPhone" in user_agent:
        version = _first_group(_IOS_VERSION, user_agent)
        return f"iPhone iOS {_dotted(version)}"
    if "iPad" in user_agent:
        version = _first_group(_IOS_VERSION, user_agent)
        return f"iPad iOS {_dotted(version)}"
    if "Windows NT" in user_agent:
        version = _first_group(_WINDOWS_VERSION, user_agent) or "Unknown"
        return f"Windows {version}"
    if "Mac OS X" in user_agent:
        version = _first_group(_MAC_VERSION, user_agent)
        return f"macOS {_dotted(version)}"
    if "Linux" in user_agent:
        return "Linux"
    return "Unknown Device"


def describe_host() -> str:
    """Describe the machine a kiosk process runs on."""
    system = platform.system() or "Unknown"
    release = platform.release()
    node = platform.node()
    label = f"{system} {release}".strip()
    return f"{label} - {node}" if node else label


def _first_group(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    return match.group(1) if match else None


def _dotted(version: str | None) -> str:
    return version.replace("_", ".") if version else "Unknown"
