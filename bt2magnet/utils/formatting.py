"""Display helpers for torrent metadata."""

from __future__ import annotations

import re

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")
_INFO_HASH_RE = re.compile(r"[a-fA-F0-9]{40}")
_MAGNET_BTIH_RE = re.compile(r"urn:btih:([a-fA-F0-9]{40})", re.IGNORECASE)


def format_file_size(size: int | None) -> str:
    """Format a byte count using 1024-based units, e.g. ``1.5 KB``."""
    if not size or size <= 0:
        return "0 Bytes"

    exponent = 0
    while size >= 1024 ** (exponent + 1) and exponent < len(_SIZE_UNITS) - 1:
        exponent += 1
    scaled = round(size / 1024**exponent, 2)
    # 1.50 -> 1.5, 2.00 -> 2
    text = f"{scaled:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[exponent]}"


def is_valid_info_hash(text: str) -> bool:
    """Check whether ``text`` is a 40 character hex info hash."""
    return bool(_INFO_HASH_RE.fullmatch(text))


def extract_info_hash_from_magnet(magnet_link: str) -> str | None:
    """Return the lower-case hex info hash embedded in a magnet link, if any."""
    match = _MAGNET_BTIH_RE.search(magnet_link)
    return match.group(1).lower() if match else None


def truncate_text(text: str, max_length: int) -> str:
    """Shorten ``text`` to ``max_length`` characters plus an ellipsis."""
    if not text or len(text) <= max_length:
        return text
    return text[:max_length] + "..."
