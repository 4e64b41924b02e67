"""Tests for magnet URI parsing and generation."""

from __future__ import annotations

import logging

import pytest

from bt2magnet.core.magnet import MagnetComponents, generate_magnet_link, parse_magnet
from bt2magnet.core.torrent import extract_descriptor
from bt2magnet.core.bencode import decode
from bt2magnet.models import TorrentDescriptor
from bt2magnet.utils.exceptions import (
    ErrorKind,
    InvalidMagnetLinkError,
    MissingInfoHashError,
)

pytestmark = [pytest.mark.unit, pytest.mark.core]

HEX = "0123456789abcdef0123456789abcdef01234567"
INFO_HASH = bytes.fromhex(HEX)


class TestParseMagnet:
    """Test magnet URI parsing."""

    def test_parse_hex(self):
        """Test a complete magnet URI."""
        uri = (
            f"magnet:?xt=urn:btih:{HEX}&dn=example"
            "&tr=udp%3A%2F%2Ftracker.example%2Fannounce&tr=http://t/announce"
        )
        components = parse_magnet(uri)
        assert components.info_hash == INFO_HASH
        assert components.name == "example"
        assert components.trackers == (
            "udp://tracker.example/announce",
            "http://t/announce",
        )

    def test_hash_only(self):
        """Test a magnet URI with nothing but the info hash."""
        components = parse_magnet(f"magnet:?xt=urn:btih:{HEX}")
        assert components.info_hash == INFO_HASH
        assert components.name is None
        assert components.trackers == ()

    def test_uppercase_hash_and_prefix(self):
        """Test hex case and the btih prefix case are not significant."""
        components = parse_magnet(f"MAGNET:?xt=URN:BTIH:{HEX.upper()}")
        assert components.info_hash_hex == HEX

    def test_surrounding_whitespace(self):
        """Test leading and trailing whitespace is ignored."""
        assert parse_magnet(f"  magnet:?xt=urn:btih:{HEX}\n").info_hash == INFO_HASH

    def test_percent_decoded_name(self):
        """Test percent-encoded UTF-8 names."""
        components = parse_magnet(f"magnet:?xt=urn:btih:{HEX}&dn=h%C3%A9llo%20world")
        assert components.name == "héllo world"

    def test_plus_is_literal(self):
        """Test '+' is not treated as a space."""
        components = parse_magnet(f"magnet:?xt=urn:btih:{HEX}&dn=a+b")
        assert components.name == "a+b"

    def test_first_name_wins(self):
        """Test only the first non-empty dn is used."""
        components = parse_magnet(f"magnet:?dn=&xt=urn:btih:{HEX}&dn=first&dn=second")
        assert components.name == "first"

    def test_unescaped_hash_sign_kept(self):
        """Test a bare '#' does not cut off the remaining parameters."""
        components = parse_magnet(
            f"magnet:?xt=urn:btih:{HEX}&dn=C#&tr=http://t/announce"
        )
        assert components.name == "C#"
        assert components.trackers == ("http://t/announce",)

    def test_unknown_parameters_ignored(self):
        """Test parameters other than xt, dn and tr."""
        components = parse_magnet(f"magnet:?xl=10&xt=urn:btih:{HEX}&ws=http://seed/&&")
        assert components.info_hash == INFO_HASH

    def test_malformed_percent_keeps_raw_value(self, caplog):
        """Test advisory values with broken escapes are kept verbatim."""
        with caplog.at_level(logging.WARNING, logger="bt2magnet"):
            components = parse_magnet(f"magnet:?xt=urn:btih:{HEX}&dn=100%zz&tr=http://t/%E2")
        assert components.name == "100%zz"
        assert components.trackers == ("http://t/%E2",)
        assert "keeping raw form" in caplog.text

    def test_non_btih_xt_skipped(self):
        """Test other xt URNs are skipped in favor of btih."""
        components = parse_magnet(f"magnet:?xt=urn:sha1:ABC&xt=urn:btih:{HEX}")
        assert components.info_hash == INFO_HASH

    @pytest.mark.parametrize(
        "uri",
        [
            "magnet:?dn=foo",
            "magnet:?",
            "magnet:",
            "magnet:?xt=urn:sha1:ABC",
        ],
    )
    def test_missing_info_hash(self, uri):
        """Test magnet URIs without an xt=urn:btih parameter."""
        with pytest.raises(MissingInfoHashError) as exc_info:
            parse_magnet(uri)
        assert exc_info.value.kind is ErrorKind.MISSING_INFO_HASH

    @pytest.mark.parametrize(
        "uri",
        [
            "http://example.com/?xt=urn:btih:" + HEX,
            "not a magnet",
            "magnet:?xt=urn:btih:1234",
            "magnet:?xt=urn:btih:" + "g" * 40,
            "magnet:?xt=urn:btih:" + HEX + "00",
        ],
    )
    def test_invalid_magnet(self, uri):
        """Test text that is not a usable magnet URI."""
        with pytest.raises(InvalidMagnetLinkError) as exc_info:
            parse_magnet(uri)
        assert exc_info.value.kind is ErrorKind.INVALID_MAGNET_LINK

    def test_to_descriptor(self):
        """Test folding components into a hash-only descriptor."""
        descriptor = MagnetComponents(
            info_hash=INFO_HASH,
            name="x",
            trackers=("http://a/", "http://a/"),
        ).to_descriptor()
        assert descriptor.is_hash_only
        assert descriptor.total_length is None
        assert descriptor.trackers == ("http://a/",)


class TestGenerateMagnetLink:
    """Test magnet URI generation."""

    def test_hash_only(self):
        """Test a descriptor with no name or trackers."""
        descriptor = TorrentDescriptor(info_hash=INFO_HASH)
        assert generate_magnet_link(descriptor) == f"magnet:?xt=urn:btih:{HEX}"

    def test_name_and_trackers_encoded(self):
        """Test values are percent-encoded with no safe characters."""
        descriptor = TorrentDescriptor(
            info_hash=INFO_HASH,
            name="a b&c/é",
            trackers=("udp://tracker.example/announce",),
        )
        assert generate_magnet_link(descriptor) == (
            f"magnet:?xt=urn:btih:{HEX}"
            "&dn=a%20b%26c%2F%C3%A9"
            "&tr=udp%3A%2F%2Ftracker.example%2Fannounce"
        )

    def test_name_override(self):
        """Test an explicit name replaces the descriptor's own."""
        descriptor = TorrentDescriptor(info_hash=INFO_HASH, name="original")
        link = generate_magnet_link(descriptor, name="custom")
        assert "dn=custom" in link
        assert "original" not in link

    def test_fallback_trackers_only_when_requested(self):
        """Test caller trackers need include_trackers."""
        descriptor = TorrentDescriptor(info_hash=INFO_HASH)
        fallback = ["http://a/announce", "", "http://a/announce", "http://b/announce"]

        assert "tr=" not in generate_magnet_link(descriptor, trackers=fallback)

        link = generate_magnet_link(descriptor, trackers=fallback, include_trackers=True)
        assert link.count("tr=") == 2
        assert link.index("http%3A%2F%2Fa") < link.index("http%3A%2F%2Fb")

    def test_own_trackers_take_precedence(self):
        """Test fallback trackers are not added when the source has trackers."""
        descriptor = TorrentDescriptor(info_hash=INFO_HASH, trackers=("http://own/",))
        link = generate_magnet_link(
            descriptor,
            trackers=["http://other/"],
            include_trackers=True,
        )
        assert "own" in link
        assert "other" not in link

    def test_accepts_magnet_components(self):
        """Test components can be serialized directly."""
        components = MagnetComponents(info_hash=INFO_HASH, name="n")
        assert generate_magnet_link(components) == f"magnet:?xt=urn:btih:{HEX}&dn=n"


class TestRoundTrip:
    """Test parse and generate against each other."""

    @pytest.mark.parametrize(
        "name",
        ["plain", "with space", "a+b", "100%", "ünïcödé", "semi;colon=eq&amp"],
    )
    def test_generated_links_parse_back(self, name):
        """Test generated links parse back to the same components."""
        descriptor = TorrentDescriptor(
            info_hash=INFO_HASH,
            name=name,
            trackers=("udp://tracker.example:1337/announce?x=1&y=2",),
        )
        components = parse_magnet(generate_magnet_link(descriptor))
        assert components.info_hash == descriptor.info_hash
        assert components.name == name
        assert components.trackers == descriptor.trackers

    def test_torrent_to_magnet(self, single_file_torrent):
        """Test a torrent file becomes the expected magnet URI."""
        descriptor = extract_descriptor(decode(single_file_torrent))
        assert generate_magnet_link(descriptor) == (
            "magnet:?xt=urn:btih:373bf645d8091a05eeaaecd87a73b71237817acd&dn=a.txt"
        )
