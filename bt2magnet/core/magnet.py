"""Magnet URI parsing and generation (BEP 9 subset).

Only the ``xt`` (``urn:btih:`` with a 40 character hex hash), ``dn`` and ``tr``
parameters are understood. ``dn`` and ``tr`` are advisory: a value whose
percent-encoding is broken is kept in its raw form instead of failing the parse.
"""

from __future__ import annotations

import logging
import re
import urllib.parse
from dataclasses import dataclass
from typing import Iterable, Union

from bt2magnet.models import TorrentDescriptor
from bt2magnet.utils.exceptions import InvalidMagnetLinkError, MissingInfoHashError

logger = logging.getLogger(__name__)

MAGNET_SCHEME = "magnet"
BTIH_PREFIX = "urn:btih:"

_HEX_INFO_HASH_RE = re.compile(r"[0-9a-fA-F]{40}")
_BAD_PERCENT_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


@dataclass(frozen=True)
class MagnetComponents:
    """Information extracted from a magnet link."""

    info_hash: bytes
    name: str | None = None
    trackers: tuple[str, ...] = ()

    @property
    def info_hash_hex(self) -> str:
        """Lower-case hex form of the info hash."""
        return self.info_hash.hex()

    def to_descriptor(self) -> TorrentDescriptor:
        """Fold into a hash-only :class:`TorrentDescriptor`."""
        return TorrentDescriptor(
            info_hash=self.info_hash,
            name=self.name,
            trackers=self.trackers,
        )


MagnetSource = Union[TorrentDescriptor, MagnetComponents]


def _percent_decode(value: str) -> str | None:
    """Percent-decode ``value``; None if the escapes or the UTF-8 are malformed."""
    if _BAD_PERCENT_RE.search(value):
        return None
    try:
        return urllib.parse.unquote(value, errors="strict")
    except UnicodeDecodeError:
        return None


def _advisory_value(raw: str, param: str) -> str:
    decoded = _percent_decode(raw)
    if decoded is None:
        logger.warning("Could not percent-decode magnet '%s' value, keeping raw form", param)
        return raw
    return decoded


def _query_pairs(query: str) -> list[tuple[str, str]]:
    pairs = []
    for chunk in query.split("&"):
        if not chunk:
            continue
        key, _, value = chunk.partition("=")
        pairs.append((key, value))
    return pairs


def _parse_btih(xt_values: list[str]) -> bytes:
    for raw in xt_values:
        xt = _percent_decode(raw) or raw
        if xt[: len(BTIH_PREFIX)].lower() != BTIH_PREFIX:
            continue
        btih = xt[len(BTIH_PREFIX) :]
        if not _HEX_INFO_HASH_RE.fullmatch(btih):
            msg = "Magnet info hash must be 40 hexadecimal characters"
            raise InvalidMagnetLinkError(msg, {"xt": xt})
        return bytes.fromhex(btih)

    msg = "Magnet URI missing xt=urn:btih"
    raise MissingInfoHashError(msg)


def parse_magnet(uri: str) -> MagnetComponents:
    """Parse a magnet URI into :class:`MagnetComponents`.

    Raises:
        InvalidMagnetLinkError: If ``uri`` is not a magnet URI or its hash is invalid
        MissingInfoHashError: If there is no ``xt=urn:btih:`` parameter

    """
    uri = uri.strip()
    try:
        parsed = urllib.parse.urlsplit(uri)
    except ValueError as e:
        msg = f"Malformed magnet URI: {e}"
        raise InvalidMagnetLinkError(msg) from e
    if parsed.scheme.lower() != MAGNET_SCHEME:
        msg = "Not a magnet URI"
        raise InvalidMagnetLinkError(msg)

    xt_values: list[str] = []
    name: str | None = None
    trackers: list[str] = []
    # Everything after the first "?" is query; an unescaped "#" stays in the value
    for key, raw in _query_pairs(uri.partition("?")[2]):
        if key == "xt":
            xt_values.append(raw)
        elif key == "dn":
            if name is None and raw:
                name = _advisory_value(raw, "dn")
        elif key == "tr" and raw:
            trackers.append(_advisory_value(raw, "tr"))

    info_hash = _parse_btih(xt_values)
    return MagnetComponents(info_hash=info_hash, name=name, trackers=tuple(trackers))


def _quote(value: str) -> str:
    return urllib.parse.quote(value, safe="")


def generate_magnet_link(
    source: MagnetSource,
    name: str | None = None,
    trackers: Iterable[str] | None = None,
    include_trackers: bool = False,
) -> str:
    """Serialize a descriptor into a magnet URI.

    Trackers carried by ``source`` itself are always emitted. Caller-supplied
    ``trackers`` are only emitted when ``source`` has none and
    ``include_trackers`` is set.

    Args:
        source: Descriptor or parsed magnet components
        name: Display name overriding the descriptor's own name
        trackers: Fallback tracker URIs
        include_trackers: Whether fallback trackers may be emitted

    Returns:
        Complete magnet URI string

    """
    parts = [f"magnet:?xt={BTIH_PREFIX}{source.info_hash.hex()}"]

    display_name = name or source.name
    if display_name:
        parts.append(f"dn={_quote(display_name)}")

    if source.trackers:
        emitted: Iterable[str] = source.trackers
    elif include_trackers and trackers:
        emitted = dict.fromkeys(t for t in trackers if t)
    else:
        emitted = ()

    parts.extend(f"tr={_quote(tracker)}" for tracker in emitted)
    return "&".join(parts)
