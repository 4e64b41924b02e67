"""Pytest configuration and shared fixtures for bt2magnet tests."""

from __future__ import annotations

import logging
import os

import pytest

from bt2magnet.config.config import reset_config
from bt2magnet.core.bencode import encode
from bt2magnet.utils.logging_config import ROOT_LOGGER_NAME


def pytest_configure(config):
    """Register all project markers to avoid warnings when ini isn't loaded."""
    markers = [
        ("unit", "marks tests as unit tests"),
        ("core", "marks tests as core functionality tests"),
        ("cli", "marks tests as CLI tests"),
        ("config", "marks tests as configuration tests"),
        ("property", "marks tests as property-based tests"),
    ]
    for name, desc in markers:
        config.addinivalue_line("markers", f"{name}: {desc}")


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path):
    """Keep user config files and BT2MAGNET_* variables out of tests."""
    for name in list(os.environ):
        if name.startswith("BT2MAGNET_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    yield
    reset_config()


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Clean up logging handlers after each test to prevent closed file errors."""
    yield
    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        logger = logging.getLogger(logger_name)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    # setup_logging detaches the package logger from the root; undo for caplog
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)


def create_test_torrent_dict(
    name: str = "a.txt",
    length: int = 3,
    piece_length: int = 16384,
    announce: str | None = None,
    **extra,
) -> dict:
    """Build a native single-file torrent structure."""
    torrent = {
        "info": {
            "length": length,
            "name": name,
            "piece length": piece_length,
            "pieces": b"\x00" * 20,
        },
    }
    if announce is not None:
        torrent["announce"] = announce
    torrent.update(extra)
    return torrent


@pytest.fixture
def torrent_dict():
    """Factory for native torrent structures."""
    return create_test_torrent_dict


@pytest.fixture
def single_file_torrent() -> bytes:
    """Bencoded single-file torrent with a known info hash."""
    return encode(create_test_torrent_dict())


@pytest.fixture
def multi_file_torrent() -> bytes:
    """Bencoded multi-file torrent with trackers and advisory fields."""
    return encode(
        {
            "announce": "udp://tracker.example/announce",
            "announce-list": [
                ["udp://tracker.example/announce", "http://backup.example/announce"],
                ["udp://third.example/announce"],
            ],
            "comment": "Test torrent",
            "created by": "bt2magnet tests",
            "creation date": 1700000000,
            "info": {
                "name": "Dir",
                "piece length": 512,
                "pieces": b"x" * 40,
                "private": 1,
                "files": [
                    {"length": 600, "path": ["a.txt"]},
                    {"length": 400, "path": ["sub", "b.txt"]},
                ],
            },
        }
    )
