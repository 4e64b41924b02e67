"""Tests for pydantic models."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from bt2magnet.core.bencode import DEFAULT_MAX_DEPTH
from bt2magnet.models import (
    DEFAULT_TRACKERS,
    CodecConfig,
    Config,
    FileEntry,
    MagnetConfig,
    MagnetRecord,
    RecordSource,
    TorrentDescriptor,
)

pytestmark = [pytest.mark.unit]

HEX = "0123456789abcdef0123456789abcdef01234567"


class TestTorrentDescriptor:
    """Test the torrent descriptor model."""

    def test_hex_info_hash_coerced(self):
        """Test a hex string is accepted for the info hash."""
        descriptor = TorrentDescriptor(info_hash=HEX)
        assert descriptor.info_hash == bytes.fromhex(HEX)
        assert descriptor.info_hash_hex == HEX

    @pytest.mark.parametrize("info_hash", [b"short", b"\x00" * 21, "z" * 40])
    def test_invalid_info_hash(self, info_hash):
        """Test info hashes that are not 20 bytes."""
        with pytest.raises(ValidationError):
            TorrentDescriptor(info_hash=info_hash)

    def test_trackers_deduplicated(self):
        """Test tracker de-duplication keeps first occurrence order."""
        descriptor = TorrentDescriptor(
            info_hash=HEX,
            trackers=("http://b/", "http://a/", "http://b/"),
        )
        assert descriptor.trackers == ("http://b/", "http://a/")

    def test_files_and_length_together(self):
        """Test files and total_length must be given together."""
        with pytest.raises(ValidationError):
            TorrentDescriptor(info_hash=HEX, total_length=3)
        with pytest.raises(ValidationError):
            TorrentDescriptor(info_hash=HEX, files=(FileEntry(path="a", length=3),))

    def test_frozen(self):
        """Test descriptors are immutable."""
        descriptor = TorrentDescriptor(info_hash=HEX)
        with pytest.raises(ValidationError):
            descriptor.name = "x"

    def test_display_name(self):
        """Test display name falls back to the hash."""
        descriptor = TorrentDescriptor(info_hash=HEX)
        assert descriptor.display_name == HEX
        assert descriptor.with_name("n").display_name == "n"

    def test_json_serializes_hash_as_hex(self):
        """Test JSON output carries the hex hash."""
        descriptor = TorrentDescriptor(info_hash=bytes.fromhex("ff" * 20))
        data = json.loads(descriptor.model_dump_json())
        assert data["info_hash"] == "ff" * 20

    def test_negative_file_length(self):
        """Test file lengths cannot be negative."""
        with pytest.raises(ValidationError):
            FileEntry(path="a", length=-1)


class TestMagnetRecord:
    """Test history records."""

    def test_from_descriptor(self):
        """Test building a record from a descriptor."""
        descriptor = TorrentDescriptor(info_hash=HEX, name="n")
        record = MagnetRecord.from_descriptor(descriptor, "magnet:?x", RecordSource.FILE)
        assert record.name == "n"
        assert record.info_hash == HEX
        assert record.source is RecordSource.FILE
        assert len(record.id) == 32
        assert record.created_at.tzinfo is not None

    def test_name_falls_back_to_hash(self):
        """Test nameless descriptors are recorded under their hash."""
        descriptor = TorrentDescriptor(info_hash=HEX)
        record = MagnetRecord.from_descriptor(descriptor, "magnet:?x", RecordSource.INPUT)
        assert record.name == HEX

    def test_rejects_uppercase_hash(self):
        """Test the recorded hash must be canonical lower-case hex."""
        with pytest.raises(ValidationError):
            MagnetRecord(
                magnet_link="magnet:?x",
                source=RecordSource.INPUT,
                name="n",
                info_hash=HEX.upper(),
            )


class TestConfigModels:
    """Test configuration models."""

    def test_defaults(self):
        """Test default configuration values."""
        config = Config()
        assert config.observability.log_level.value == "WARNING"
        assert config.codec.max_depth == DEFAULT_MAX_DEPTH
        assert config.magnet.include_trackers is False
        assert config.magnet.default_trackers == DEFAULT_TRACKERS

    def test_default_trackers_not_shared(self):
        """Test each config gets its own tracker list."""
        config = MagnetConfig()
        config.default_trackers.append("http://x/")
        assert "http://x/" not in DEFAULT_TRACKERS

    def test_trackers_stripped(self):
        """Test blank tracker entries are dropped."""
        config = MagnetConfig(default_trackers=[" http://a/ ", "", "  "])
        assert config.default_trackers == ["http://a/"]

    @pytest.mark.parametrize("depth", [0, 401])
    def test_max_depth_bounds(self, depth):
        """Test max depth limits."""
        with pytest.raises(ValidationError):
            CodecConfig(max_depth=depth)
