"""Torrent file parsing for bt2magnet.

This module walks a decoded ``.torrent`` value tree, extracts its metadata and
calculates the info hash as required by the BitTorrent protocol.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from bt2magnet.core.bencode import (
    DEFAULT_MAX_DEPTH,
    BencodeDict,
    BencodeInteger,
    BencodeList,
    BencodeString,
    BencodeValue,
    decode,
    encode,
)
from bt2magnet.models import FileEntry, TorrentDescriptor
from bt2magnet.utils.exceptions import (
    InvalidTorrentStructureError,
    MissingInfoFieldError,
    TorrentError,
)

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"


def compute_info_hash(info: BencodeDict) -> bytes:
    """Return the SHA-1 digest of the canonically encoded ``info`` dictionary."""
    return hashlib.sha1(encode(info)).digest()  # nosec B324 - SHA-1 required by BitTorrent protocol (BEP 3)


def _text(value: BencodeValue | None, field: str) -> str | None:
    """Decode an advisory text field, or return None if it is absent or wrong-typed."""
    if not isinstance(value, BencodeString):
        if value is not None:
            logger.debug("Ignoring non-string %s field", field)
        return None
    try:
        return value.text()
    except UnicodeDecodeError:
        logger.warning("Field %s is not valid UTF-8, decoding with replacement", field)
        return value.text(errors="replace")


def _integer(value: BencodeValue | None) -> int | None:
    return value.value if isinstance(value, BencodeInteger) else None


def extract_trackers(root: BencodeDict) -> list[str]:
    """Collect ``announce`` and ``announce-list`` URIs, de-duplicated, in order."""
    candidates: list[BencodeValue] = []
    if b"announce" in root:
        candidates.append(root[b"announce"])

    announce_list = root.get(b"announce-list")
    if isinstance(announce_list, BencodeList):
        for tier in announce_list:
            if isinstance(tier, BencodeList):
                candidates.extend(tier)
            else:
                candidates.append(tier)

    trackers: dict[str, None] = {}
    for candidate in candidates:
        url = _text(candidate, "announce")
        if url:
            trackers.setdefault(url, None)
    return list(trackers)


def _file_entry(entry: BencodeValue, index: int) -> FileEntry:
    if not isinstance(entry, BencodeDict):
        msg = f"File entry {index} is not a dictionary"
        raise InvalidTorrentStructureError(msg)

    length = _integer(entry.get(b"length"))
    if length is None or length < 0:
        msg = f"File entry {index} has no valid length"
        raise InvalidTorrentStructureError(msg)

    segments = entry.get(b"path")
    if (
        not isinstance(segments, BencodeList)
        or not segments
        or not all(isinstance(segment, BencodeString) for segment in segments)
    ):
        msg = f"File entry {index} has no valid path"
        raise InvalidTorrentStructureError(msg)

    path = PATH_SEPARATOR.join(segment.text(errors="replace") for segment in segments)
    return FileEntry(path=path, length=length)


def extract_files(info: BencodeDict, name: str | None) -> list[FileEntry]:
    """Return the file layout of an ``info`` dictionary.

    Raises:
        InvalidTorrentStructureError: If neither ``files`` nor ``length`` is usable

    """
    if b"files" in info:
        files = info[b"files"]
        if not isinstance(files, BencodeList):
            msg = "Torrent 'files' is not a list"
            raise InvalidTorrentStructureError(msg)
        return [_file_entry(entry, index) for index, entry in enumerate(files)]

    if b"length" in info:
        length = _integer(info[b"length"])
        if length is None or length < 0:
            msg = "Torrent 'length' is not a non-negative integer"
            raise InvalidTorrentStructureError(msg)
        return [FileEntry(path=name or "", length=length)]

    msg = "Torrent must specify either length (single file) or files (multi-file)"
    raise InvalidTorrentStructureError(msg)


def extract_descriptor(root: BencodeValue) -> TorrentDescriptor:
    """Build a :class:`TorrentDescriptor` from a decoded ``.torrent`` value tree.

    The info hash depends only on the ``info`` dictionary, so tracker lists and
    other outer fields can change without changing the torrent's identity.

    Raises:
        MissingInfoFieldError: If there is no ``info`` dictionary
        InvalidTorrentStructureError: If the file layout is unusable

    """
    if not isinstance(root, BencodeDict):
        msg = "Torrent root is not a dictionary"
        raise MissingInfoFieldError(msg)

    info = root.get(b"info")
    if not isinstance(info, BencodeDict):
        msg = "Missing or invalid info dictionary in torrent"
        raise MissingInfoFieldError(msg)

    info_hash = compute_info_hash(info)
    name = _text(info.get(b"name"), "name")
    files = extract_files(info, name)

    piece_length = _integer(info.get(b"piece length"))
    if piece_length is not None and piece_length <= 0:
        piece_length = None

    descriptor = TorrentDescriptor(
        info_hash=info_hash,
        name=name,
        trackers=tuple(extract_trackers(root)),
        files=tuple(files),
        total_length=sum(entry.length for entry in files),
        piece_length=piece_length,
        comment=_text(root.get(b"comment"), "comment"),
        created_by=_text(root.get(b"created by"), "created by"),
        creation_date=_integer(root.get(b"creation date")),
        is_private=_integer(info.get(b"private")) == 1,
    )
    logger.debug(
        "Extracted torrent %s: %d file(s), %d tracker(s)",
        descriptor.info_hash_hex,
        len(files),
        len(descriptor.trackers),
    )
    return descriptor


class TorrentParser:
    """Parser for BitTorrent torrent files."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        """Initialize the torrent parser.

        Args:
            max_depth: Maximum nesting depth accepted by the bencode decoder

        """
        self.max_depth = max_depth

    def parse(self, torrent_path: str | Path) -> TorrentDescriptor:
        """Parse a torrent file from a local path.

        Raises:
            TorrentError: If the file cannot be read
            BencodeDecodeError: If the file is not valid bencode

        """
        return self.parse_bytes(self._read_from_file(torrent_path))

    def parse_bytes(self, data: bytes | bytearray | memoryview) -> TorrentDescriptor:
        """Parse the raw bytes of a torrent file."""
        return extract_descriptor(decode(data, max_depth=self.max_depth))

    def _read_from_file(self, file_path: str | Path) -> bytes:
        """Read torrent data from a local file."""
        path = Path(file_path)
        if not path.is_file():
            msg = f"Torrent file not found: {path}"
            raise TorrentError(msg, {"path": str(path)})

        try:
            return path.read_bytes()
        except OSError as e:
            msg = f"Failed to read torrent file: {e}"
            raise TorrentError(msg, {"path": str(path)}) from e
