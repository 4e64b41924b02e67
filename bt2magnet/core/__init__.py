"""Torrent metadata codec.

This package contains the components that do real format work:
- Bencoding (encoding/decoding)
- Torrent file parsing and info hash calculation
- Magnet link parsing and generation
- Input resolution
"""

from __future__ import annotations

from bt2magnet.core.bencode import (
    DEFAULT_MAX_DEPTH,
    BencodeDecoder,
    BencodeDict,
    BencodeEncoder,
    BencodeInteger,
    BencodeList,
    BencodeString,
    BencodeValue,
    canonicalize,
    decode,
    decode_at,
    encode,
    from_python,
    to_python,
)
from bt2magnet.core.magnet import (
    MagnetComponents,
    generate_magnet_link,
    parse_magnet,
)
from bt2magnet.core.resolver import resolve_from_bytes, resolve_from_text
from bt2magnet.core.torrent import TorrentParser, compute_info_hash, extract_descriptor

__all__ = [
    "DEFAULT_MAX_DEPTH",
    # Bencoding
    "BencodeDecoder",
    "BencodeDict",
    "BencodeEncoder",
    "BencodeInteger",
    "BencodeList",
    "BencodeString",
    "BencodeValue",
    # Magnet
    "MagnetComponents",
    # Torrent
    "TorrentParser",
    "canonicalize",
    "compute_info_hash",
    "decode",
    "decode_at",
    "encode",
    "extract_descriptor",
    "from_python",
    "generate_magnet_link",
    "parse_magnet",
    "resolve_from_bytes",
    "resolve_from_text",
    "to_python",
]
