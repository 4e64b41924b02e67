"""Exception hierarchy for bt2magnet.

Every failure the codec, extractor, magnet parser or resolver can report is a
subclass of :class:`Bt2MagnetError`. The leaf classes carry an :class:`ErrorKind`
so callers can surface a stable error category without matching on class names.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar


class ErrorKind(str, Enum):
    """Stable error categories reported by the core."""

    INVALID_BENCODE_TAG = "InvalidBencodeTag"
    MALFORMED_INTEGER = "MalformedInteger"
    MALFORMED_STRING = "MalformedString"
    MALFORMED_LIST = "MalformedList"
    MALFORMED_DICTIONARY = "MalformedDictionary"
    STRUCTURE_TOO_DEEP = "StructureTooDeep"
    MISSING_INFO_FIELD = "MissingInfoField"
    INVALID_TORRENT_STRUCTURE = "InvalidTorrentStructure"
    INVALID_MAGNET_LINK = "InvalidMagnetLink"
    MISSING_INFO_HASH = "MissingInfoHash"
    UNRECOGNIZED_INPUT_FORMAT = "UnrecognizedInputFormat"


class Bt2MagnetError(Exception):
    """Base exception for all bt2magnet errors."""

    kind: ClassVar[ErrorKind | None] = None

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize bt2magnet error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class ValidationError(Bt2MagnetError):
    """Data validation errors."""


class ConfigurationError(ValidationError):
    """Configuration validation errors."""


class BencodeError(ValidationError):
    """Bencode encoding/decoding errors."""


class BencodeDecodeError(BencodeError):
    """Input bytes are not valid bencode."""


class BencodeEncodeError(BencodeError):
    """A value cannot be represented in bencode."""


class InvalidBencodeTagError(BencodeDecodeError):
    """Leading byte does not start any bencode value."""

    kind = ErrorKind.INVALID_BENCODE_TAG


class MalformedIntegerError(BencodeDecodeError):
    """Integer is unterminated or its digits are not a canonical decimal."""

    kind = ErrorKind.MALFORMED_INTEGER


class MalformedStringError(BencodeDecodeError):
    """Byte string has a bad length prefix or is truncated."""

    kind = ErrorKind.MALFORMED_STRING


class MalformedListError(BencodeDecodeError):
    """List ends before its terminator."""

    kind = ErrorKind.MALFORMED_LIST


class MalformedDictionaryError(BencodeDecodeError):
    """Dictionary has a non-string key, a duplicate key or no terminator."""

    kind = ErrorKind.MALFORMED_DICTIONARY


class StructureTooDeepError(BencodeDecodeError):
    """Nesting of lists and dictionaries exceeds the decoder's depth cap."""

    kind = ErrorKind.STRUCTURE_TOO_DEEP


class TorrentError(ValidationError):
    """Torrent file validation errors."""


class MissingInfoFieldError(TorrentError):
    """Torrent has no ``info`` dictionary."""

    kind = ErrorKind.MISSING_INFO_FIELD


class InvalidTorrentStructureError(TorrentError):
    """Torrent ``info`` dictionary has no usable file layout."""

    kind = ErrorKind.INVALID_TORRENT_STRUCTURE


class MagnetError(ValidationError):
    """Magnet URI errors."""


class InvalidMagnetLinkError(MagnetError):
    """Text is not a usable ``magnet:`` URI."""

    kind = ErrorKind.INVALID_MAGNET_LINK


class MissingInfoHashError(InvalidMagnetLinkError):
    """Magnet URI carries no ``xt=urn:btih:`` parameter."""

    kind = ErrorKind.MISSING_INFO_HASH


class UnrecognizedInputFormatError(ValidationError):
    """Text is neither a magnet URI nor a 40 character hex info-hash."""

    kind = ErrorKind.UNRECOGNIZED_INPUT_FORMAT
