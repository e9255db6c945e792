"""Helpers for UNC paths (\\\\host\\share) and drive letters."""

import re
import string
from typing import Tuple

_LETTER_RE = re.compile(r"^([A-Za-z]):?\\?$")


def normalize_remote_path(remote_path: str) -> str:
    """Convert smb:// URLs and forward slashes to Windows UNC form."""
    path = remote_path.strip()
    if path.lower().startswith("smb://"):
        path = "//" + path[6:]
    return path.replace("/", "\\").rstrip("\\")


def parse_unc(remote_path: str) -> Tuple[str, str]:
    """Split a UNC path into (host, share). Raises ValueError if it is not one."""
    path = normalize_remote_path(remote_path)
    if not path.startswith("\\\\"):
        raise ValueError(f"Not a UNC path: {remote_path!r}")

    parts = [part for part in path[2:].split("\\") if part]
    if len(parts) < 2:
        raise ValueError(f"UNC path has no share component: {remote_path!r}")
    return parts[0], parts[1]


def host_of(remote_path: str) -> str:
    """Host part of a UNC path, or empty string when it cannot be parsed."""
    try:
        return parse_unc(remote_path)[0]
    except ValueError:
        return ""


def same_remote(left: str, right: str) -> bool:
    """Windows compares share paths case-insensitively."""
    return normalize_remote_path(left).casefold() == normalize_remote_path(right).casefold()


def normalize_drive_letter(value: str) -> str:
    """'z', 'Z:' and 'Z:\\' all become 'Z'; empty stays empty."""
    value = (value or "").strip()
    if not value:
        return ""
    match = _LETTER_RE.match(value)
    if not match or match.group(1).upper() not in string.ascii_uppercase:
        raise ValueError(f"Invalid drive letter: {value!r}")
    return match.group(1).upper()


def mount_point(drive_letter: str) -> str:
    return f"{drive_letter}:\\"


def to_title_case(text: str) -> str:
    """Capitalize each space-separated word, lowercasing the rest ('DATA' -> 'Data')."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" "))
