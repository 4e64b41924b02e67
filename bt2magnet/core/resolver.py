"""Single entry point turning user input into a :class:`TorrentDescriptor`."""

from __future__ import annotations

import re

from bt2magnet.core.bencode import DEFAULT_MAX_DEPTH, decode
from bt2magnet.core.magnet import MAGNET_SCHEME, parse_magnet
from bt2magnet.core.torrent import extract_descriptor
from bt2magnet.models import TorrentDescriptor
from bt2magnet.utils.exceptions import UnrecognizedInputFormatError

_HEX_INFO_HASH_RE = re.compile(r"[0-9a-fA-F]{40}")
_MAGNET_PREFIX = f"{MAGNET_SCHEME}:"


def resolve_from_text(text: str) -> TorrentDescriptor:
    """Resolve a magnet URI or a bare 40 character hex info hash.

    Raises:
        InvalidMagnetLinkError: If a magnet URI cannot be parsed
        UnrecognizedInputFormatError: If ``text`` is neither form

    """
    candidate = text.strip()
    if candidate[: len(_MAGNET_PREFIX)].lower() == _MAGNET_PREFIX:
        return parse_magnet(candidate).to_descriptor()
    if _HEX_INFO_HASH_RE.fullmatch(candidate):
        return TorrentDescriptor(info_hash=bytes.fromhex(candidate))

    msg = "Input is neither a magnet URI nor a 40 character hexadecimal info hash"
    raise UnrecognizedInputFormatError(msg)


def resolve_from_bytes(
    data: bytes | bytearray | memoryview,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> TorrentDescriptor:
    """Resolve the raw bytes of a ``.torrent`` file.

    Decoding and extraction errors propagate unchanged.
    """
    return extract_descriptor(decode(data, max_depth=max_depth))
