"""Pydantic models for bt2magnet.

Provides validated data models for type safety and runtime validation.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

INFO_HASH_LENGTH = 20
INFO_HASH_HEX_LENGTH = 40


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class RecordSource(str, Enum):
    """Where a conversion's input came from."""

    FILE = "file"
    INPUT = "input"


class FileEntry(BaseModel):
    """One file listed in a torrent."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="File path, segments joined with '/'")
    length: int = Field(..., ge=0, description="File length in bytes")


class TorrentDescriptor(BaseModel):
    """Normalized description of a torrent.

    Produced from a ``.torrent`` file, a magnet URI or a bare info-hash. Hash-only
    inputs carry neither ``files`` nor ``total_length``; inputs with a file layout
    carry both.
    """

    model_config = ConfigDict(frozen=True)

    info_hash: bytes = Field(
        ...,
        min_length=INFO_HASH_LENGTH,
        max_length=INFO_HASH_LENGTH,
        description="SHA-1 info hash",
    )
    name: str | None = Field(None, description="Torrent name")
    trackers: tuple[str, ...] = Field(
        default=(),
        description="Tracker URIs, de-duplicated, in source order",
    )
    files: tuple[FileEntry, ...] | None = Field(None, description="File list")
    total_length: int | None = Field(None, ge=0, description="Total length in bytes")

    # Advisory metadata, only present for .torrent input
    piece_length: int | None = Field(None, gt=0, description="Piece length in bytes")
    comment: str | None = Field(None, description="Torrent comment")
    created_by: str | None = Field(None, description="Created by")
    creation_date: int | None = Field(None, description="Creation date (unix time)")
    is_private: bool = Field(
        default=False,
        description="Whether torrent is marked as private (BEP 27)",
    )

    @field_validator("info_hash", mode="before")
    @classmethod
    def _coerce_hex_info_hash(cls, value: Any) -> Any:
        if isinstance(value, str) and len(value) == INFO_HASH_HEX_LENGTH:
            try:
                return bytes.fromhex(value)
            except ValueError:
                msg = f"Info hash is not hexadecimal: {value!r}"
                raise ValueError(msg) from None
        return value

    @field_validator("trackers")
    @classmethod
    def _dedupe_trackers(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(dict.fromkeys(value))

    @model_validator(mode="after")
    def _check_file_layout(self) -> TorrentDescriptor:
        if (self.files is None) != (self.total_length is None):
            msg = "files and total_length must be given together"
            raise ValueError(msg)
        return self

    @field_serializer("info_hash", when_used="json")
    def _serialize_info_hash(self, value: bytes) -> str:
        return value.hex()

    @property
    def info_hash_hex(self) -> str:
        """Canonical lower-case hex form of the info hash."""
        return self.info_hash.hex()

    @property
    def is_hash_only(self) -> bool:
        """True when no file layout is known."""
        return self.files is None

    @property
    def display_name(self) -> str:
        """Name for display, falling back to the hex info hash."""
        return self.name or self.info_hash_hex

    def with_name(self, name: str | None) -> TorrentDescriptor:
        """Return a copy with ``name`` replaced."""
        return self.model_copy(update={"name": name})


class MagnetRecord(BaseModel):
    """A completed conversion, as kept in a user's history."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Record id")
    magnet_link: str = Field(..., description="Generated magnet URI")
    source: RecordSource = Field(..., description="Input kind")
    name: str = Field(..., description="Display name")
    info_hash: str = Field(
        ...,
        pattern=r"^[0-9a-f]{40}$",
        description="Lower-case hex info hash",
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation time (UTC)",
    )

    @classmethod
    def from_descriptor(
        cls,
        descriptor: TorrentDescriptor,
        magnet_link: str,
        source: RecordSource,
        name: str | None = None,
    ) -> MagnetRecord:
        """Build a record for a descriptor and the link generated from it."""
        return cls(
            magnet_link=magnet_link,
            source=source,
            name=name or descriptor.display_name,
            info_hash=descriptor.info_hash_hex,
        )


# Public trackers offered when the user asks for trackers on an input that has none.
DEFAULT_TRACKERS = [
    "udp://tracker.opentrackr.org:1337/announce",
    "udp://open.tracker.cl:1337/announce",
    "udp://9.rarbg.com:2810/announce",
    "udp://tracker.openbittorrent.com:6969/announce",
    "http://tracker.openbittorrent.com:80/announce",
]


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Log level")
    log_file: str | None = Field(None, description="Log file path")
    structured_logging: bool = Field(
        default=False,
        description="Use structured (JSON) logging",
    )
    log_correlation_id: bool = Field(
        default=True,
        description="Include correlation IDs",
    )


class CodecConfig(BaseModel):
    """Bencode decoding limits."""

    max_depth: int = Field(
        default=256,
        ge=1,
        le=400,
        description="Maximum nesting depth of lists and dictionaries",
    )


class MagnetConfig(BaseModel):
    """Magnet URI generation defaults."""

    include_trackers: bool = Field(
        default=False,
        description="Add default trackers when the input carries none",
    )
    default_trackers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TRACKERS),
        description="Trackers added when include_trackers is set",
    )

    @field_validator("default_trackers")
    @classmethod
    def _strip_trackers(cls, value: list[str]) -> list[str]:
        return [item.strip() for item in value if item.strip()]


class Config(BaseModel):
    """Main configuration model."""

    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )
    codec: CodecConfig = Field(
        default_factory=CodecConfig,
        description="Bencode codec configuration",
    )
    magnet: MagnetConfig = Field(
        default_factory=MagnetConfig,
        description="Magnet generation configuration",
    )
