"""bt2magnet - convert BitTorrent metadata into magnet URIs."""

from __future__ import annotations

__version__ = "0.1.0"

from bt2magnet.core import (
    generate_magnet_link,
    parse_magnet,
    resolve_from_bytes,
    resolve_from_text,
)
from bt2magnet.models import FileEntry, MagnetRecord, TorrentDescriptor

__all__ = [
    "FileEntry",
    "MagnetRecord",
    "TorrentDescriptor",
    "__version__",
    "generate_magnet_link",
    "parse_magnet",
    "resolve_from_bytes",
    "resolve_from_text",
]
