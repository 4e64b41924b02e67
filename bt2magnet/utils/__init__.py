"""Shared utilities and infrastructure.

This module contains common utilities used throughout the application.
"""

from __future__ import annotations

from bt2magnet.utils.exceptions import (
    BencodeError,
    Bt2MagnetError,
    ConfigurationError,
    ErrorKind,
    MagnetError,
    TorrentError,
    ValidationError,
)
from bt2magnet.utils.formatting import (
    extract_info_hash_from_magnet,
    format_file_size,
    is_valid_info_hash,
    truncate_text,
)
from bt2magnet.utils.logging_config import get_logger, setup_logging

__all__ = [
    # Exceptions
    "BencodeError",
    "Bt2MagnetError",
    "ConfigurationError",
    "ErrorKind",
    "MagnetError",
    "TorrentError",
    "ValidationError",
    # Formatting
    "extract_info_hash_from_magnet",
    "format_file_size",
    "get_logger",
    "is_valid_info_hash",
    "setup_logging",
    "truncate_text",
]
