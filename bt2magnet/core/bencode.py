"""Bencode codec (BEP 3).

Decodes bytes into an explicit tagged value tree and re-encodes a tree into its
canonical byte form. Dictionaries are always emitted with keys sorted by raw
byte value, which is what makes info-hashes reproducible.

The decoder is positional: it can start at any offset of a buffer and reports
the offset just past the value it consumed, so concatenated or embedded values
can be decoded without slicing the buffer first.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Union

from bt2magnet.utils.exceptions import (
    BencodeEncodeError,
    InvalidBencodeTagError,
    MalformedDictionaryError,
    MalformedIntegerError,
    MalformedListError,
    MalformedStringError,
    StructureTooDeepError,
)

logger = logging.getLogger(__name__)

# Lists and dictionaries nested deeper than this are rejected.
DEFAULT_MAX_DEPTH = 256

_INTEGER_RE = re.compile(rb"-?(?:0|[1-9][0-9]*)")
_LENGTH_RE = re.compile(rb"0|[1-9][0-9]*")
# No buffer holds more than 10**19 bytes
_MAX_LENGTH_DIGITS = 19

_TAG_INTEGER = ord("i")
_TAG_LIST = ord("l")
_TAG_DICT = ord("d")
_TAG_END = ord("e")
_DIGITS = frozenset(b"0123456789")


@dataclass(frozen=True)
class BencodeInteger:
    """Bencoded integer."""

    value: int


@dataclass(frozen=True)
class BencodeString:
    """Bencoded byte string. Binary safe, not assumed to be UTF-8."""

    value: bytes

    def text(self, errors: str = "strict") -> str:
        """Decode the raw bytes as UTF-8."""
        return self.value.decode("utf-8", errors=errors)


@dataclass(frozen=True)
class BencodeList:
    """Bencoded list."""

    items: tuple[BencodeValue, ...] = ()

    def __iter__(self) -> Iterator[BencodeValue]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> BencodeValue:
        return self.items[index]


@dataclass(frozen=True)
class BencodeDict:
    """Bencoded dictionary keyed by raw bytes.

    Keys keep the order they were read in; ordering only matters when the
    dictionary is encoded again.
    """

    entries: dict[bytes, BencodeValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", dict(self.entries))

    def get(self, key: bytes | str, default: Any = None) -> Any:
        """Return the value for ``key`` or ``default``."""
        return self.entries.get(_key_bytes(key), default)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, (bytes, str)):
            return _key_bytes(key) in self.entries
        return False

    def __getitem__(self, key: bytes | str) -> BencodeValue:
        return self.entries[_key_bytes(key)]

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def items(self):
        """Return ``(key, value)`` pairs in stored order."""
        return self.entries.items()


BencodeValue = Union[BencodeInteger, BencodeString, BencodeList, BencodeDict]


def _key_bytes(key: bytes | str) -> bytes:
    return key.encode("utf-8") if isinstance(key, str) else key


class BencodeDecoder:
    """Positional decoder for bencoded data."""

    def __init__(
        self,
        data: bytes | bytearray | memoryview,
        offset: int = 0,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        """Initialize the decoder.

        Args:
            data: Buffer holding bencoded data
            offset: Offset of the first byte to decode
            max_depth: Maximum nesting of lists and dictionaries

        """
        self.data = data if isinstance(data, bytes) else bytes(data)
        self.position = offset
        self.max_depth = max_depth
        self._depth = 0

    def decode(self) -> BencodeValue:
        """Decode one value starting at the current position.

        On return, ``position`` is the offset immediately past the value.
        """
        return self._decode_value()

    def _decode_value(self) -> BencodeValue:
        if self.position >= len(self.data):
            msg = "Unexpected end of data"
            raise InvalidBencodeTagError(msg, {"offset": self.position})

        tag = self.data[self.position]
        if tag == _TAG_INTEGER:
            return self._decode_integer()
        if tag == _TAG_LIST:
            return self._decode_list()
        if tag == _TAG_DICT:
            return self._decode_dict()
        if tag in _DIGITS:
            return self._decode_string()

        msg = f"Invalid bencode tag {bytes([tag])!r}"
        raise InvalidBencodeTagError(msg, {"offset": self.position})

    def _decode_integer(self) -> BencodeInteger:
        start = self.position
        end = self.data.find(b"e", start + 1)
        if end == -1:
            msg = "Unterminated integer"
            raise MalformedIntegerError(msg, {"offset": start})

        digits = self.data[start + 1 : end]
        if not _INTEGER_RE.fullmatch(digits) or digits == b"-0":
            msg = f"Invalid integer {digits[:32]!r}"
            raise MalformedIntegerError(msg, {"offset": start})

        try:
            value = int(digits)
        except ValueError:
            # Beyond the interpreter's int/str conversion limit
            msg = f"Integer too long ({len(digits)} digits)"
            raise MalformedIntegerError(msg, {"offset": start}) from None

        self.position = end + 1
        return BencodeInteger(value)

    def _decode_string(self) -> BencodeString:
        start = self.position
        colon = self.data.find(b":", start)
        if colon == -1:
            msg = "Missing ':' after string length"
            raise MalformedStringError(msg, {"offset": start})

        length_digits = self.data[start:colon]
        if not _LENGTH_RE.fullmatch(length_digits) or len(length_digits) > _MAX_LENGTH_DIGITS:
            msg = f"Invalid string length {length_digits[:32]!r}"
            raise MalformedStringError(msg, {"offset": start})

        length = int(length_digits)
        end = colon + 1 + length
        if end > len(self.data):
            msg = (
                f"String truncated: declared {length} bytes, "
                f"{len(self.data) - colon - 1} available"
            )
            raise MalformedStringError(msg, {"offset": start})

        self.position = end
        return BencodeString(self.data[colon + 1 : end])

    def _enter_container(self) -> None:
        if self._depth >= self.max_depth:
            msg = f"Nesting deeper than {self.max_depth} levels"
            raise StructureTooDeepError(msg, {"offset": self.position})
        self._depth += 1

    def _decode_list(self) -> BencodeList:
        start = self.position
        self._enter_container()
        self.position += 1

        items: list[BencodeValue] = []
        while True:
            if self.position >= len(self.data):
                msg = "Unterminated list"
                raise MalformedListError(msg, {"offset": start})
            if self.data[self.position] == _TAG_END:
                break
            items.append(self._decode_value())

        self.position += 1
        self._depth -= 1
        return BencodeList(tuple(items))

    def _decode_dict(self) -> BencodeDict:
        start = self.position
        self._enter_container()
        self.position += 1

        entries: dict[bytes, BencodeValue] = {}
        while True:
            if self.position >= len(self.data):
                msg = "Unterminated dictionary"
                raise MalformedDictionaryError(msg, {"offset": start})
            tag = self.data[self.position]
            if tag == _TAG_END:
                break
            if tag not in _DIGITS:
                msg = "Dictionary key must be a byte string"
                raise MalformedDictionaryError(msg, {"offset": self.position})

            key = self._decode_string().value
            if key in entries:
                msg = f"Duplicate dictionary key {key[:32]!r}"
                raise MalformedDictionaryError(msg, {"offset": self.position})
            if self.position >= len(self.data) or self.data[self.position] == _TAG_END:
                msg = f"Missing value for key {key[:32]!r}"
                raise MalformedDictionaryError(msg, {"offset": start})
            entries[key] = self._decode_value()

        self.position += 1
        self._depth -= 1
        return BencodeDict(entries)


class BencodeEncoder:
    """Canonical bencode encoder.

    Accepts tagged values as well as native ``int``, ``bytes``, ``str``,
    ``list``/``tuple`` and ``dict`` structures.
    """

    def encode(self, value: Any) -> bytes:
        """Encode ``value`` to its canonical bencoded form."""
        chunks: list[bytes] = []
        self._encode_into(value, chunks)
        return b"".join(chunks)

    def _encode_into(self, value: Any, chunks: list[bytes]) -> None:
        if isinstance(value, BencodeInteger):
            self._encode_int(value.value, chunks)
        elif isinstance(value, BencodeString):
            self._encode_bytes(value.value, chunks)
        elif isinstance(value, BencodeList):
            self._encode_list(value.items, chunks)
        elif isinstance(value, BencodeDict):
            self._encode_dict(value.entries, chunks)
        elif isinstance(value, bool):
            msg = "Cannot encode bool; use an explicit integer"
            raise BencodeEncodeError(msg)
        elif isinstance(value, int):
            self._encode_int(value, chunks)
        elif isinstance(value, (bytes, bytearray, memoryview)):
            self._encode_bytes(bytes(value), chunks)
        elif isinstance(value, str):
            self._encode_bytes(value.encode("utf-8"), chunks)
        elif isinstance(value, (list, tuple)):
            self._encode_list(value, chunks)
        elif isinstance(value, dict):
            self._encode_dict(_native_entries(value), chunks)
        else:
            msg = f"Cannot encode type {type(value).__name__}"
            raise BencodeEncodeError(msg)

    def _encode_int(self, value: int, chunks: list[bytes]) -> None:
        try:
            chunks.append(b"i%de" % value)
        except ValueError as e:
            msg = f"Cannot encode integer: {e}"
            raise BencodeEncodeError(msg) from None

    def _encode_bytes(self, value: bytes, chunks: list[bytes]) -> None:
        chunks.append(b"%d:" % len(value))
        chunks.append(value)

    def _encode_list(self, items: Any, chunks: list[bytes]) -> None:
        chunks.append(b"l")
        for item in items:
            self._encode_into(item, chunks)
        chunks.append(b"e")

    def _encode_dict(self, entries: dict[bytes, Any], chunks: list[bytes]) -> None:
        chunks.append(b"d")
        for key in sorted(entries):
            self._encode_bytes(key, chunks)
            self._encode_into(entries[key], chunks)
        chunks.append(b"e")


def _native_entries(value: dict[Any, Any]) -> dict[bytes, Any]:
    entries: dict[bytes, Any] = {}
    for key, item in value.items():
        if isinstance(key, str):
            raw = key.encode("utf-8")
        elif isinstance(key, (bytes, bytearray)):
            raw = bytes(key)
        else:
            msg = f"Dictionary keys must be bytes or str, got {type(key).__name__}"
            raise BencodeEncodeError(msg)
        if raw in entries:
            msg = f"Duplicate dictionary key {raw[:32]!r}"
            raise BencodeEncodeError(msg)
        entries[raw] = item
    return entries


def decode_at(
    data: bytes | bytearray | memoryview,
    offset: int = 0,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> tuple[BencodeValue, int]:
    """Decode the value at ``offset`` and return it with the offset past it."""
    decoder = BencodeDecoder(data, offset=offset, max_depth=max_depth)
    value = decoder.decode()
    return value, decoder.position


def decode(
    data: bytes | bytearray | memoryview,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> BencodeValue:
    """Decode the first value in ``data``.

    Bytes following the first complete value are ignored.
    """
    value, end = decode_at(data, 0, max_depth)
    if end < len(data):
        logger.debug("Ignoring %d trailing bytes after bencoded value", len(data) - end)
    return value


def encode(value: Any) -> bytes:
    """Encode a tagged value or native structure to canonical bencode."""
    return BencodeEncoder().encode(value)


def canonicalize(
    data: bytes | bytearray | memoryview,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> bytes:
    """Re-encode bencoded ``data`` with every dictionary's keys sorted."""
    return encode(decode(data, max_depth))


def from_python(obj: Any) -> BencodeValue:
    """Convert a native structure into a tagged value tree."""
    if isinstance(obj, (BencodeInteger, BencodeString, BencodeList, BencodeDict)):
        return obj
    if isinstance(obj, bool):
        msg = "Cannot encode bool; use an explicit integer"
        raise BencodeEncodeError(msg)
    if isinstance(obj, int):
        return BencodeInteger(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BencodeString(bytes(obj))
    if isinstance(obj, str):
        return BencodeString(obj.encode("utf-8"))
    if isinstance(obj, (list, tuple)):
        return BencodeList(tuple(from_python(item) for item in obj))
    if isinstance(obj, dict):
        entries = _native_entries(obj)
        return BencodeDict({key: from_python(item) for key, item in entries.items()})
    msg = f"Cannot encode type {type(obj).__name__}"
    raise BencodeEncodeError(msg)


def to_python(value: BencodeValue) -> Any:
    """Convert a tagged value tree into ``int``/``bytes``/``list``/``dict``."""
    if isinstance(value, BencodeInteger):
        return value.value
    if isinstance(value, BencodeString):
        return value.value
    if isinstance(value, BencodeList):
        return [to_python(item) for item in value.items]
    if isinstance(value, BencodeDict):
        return {key: to_python(item) for key, item in value.entries.items()}
    msg = f"Not a bencode value: {type(value).__name__}"
    raise TypeError(msg)
