"""
Backup file format discriminator.

Two encodings of a backup exist on disk:
- GZ: the legacy encoding, a single gzip-compressed dump stream with no
  per-record headers
- ZIP: the current encoding, a multi-member archive holding "[HDR] ..."
  metadata members and one "[DAT] ..." payload member

Only ZIP is read and written by this package. GZ is recognized so that
callers can tell a legacy backup apart from a damaged one and route it to
the legacy restore path.

How to change safely:
    - Never renumber existing values, they are persisted by callers
    - Add new encodings with new values
"""

from __future__ import annotations

import logging
from enum import IntEnum
from pathlib import Path

logger = logging.getLogger(__name__)

ZIP_MAGIC = b"PK\x03\x04"
ZIP_EMPTY_MAGIC = b"PK\x05\x06"
GZIP_MAGIC = b"\x1f\x8b"


class BackupFormat(IntEnum):
    """Encoding of a backup file."""

    UNKNOWN = 0
    GZ = 1
    ZIP = 2

    @property
    def is_legacy(self) -> bool:
        return self is BackupFormat.GZ

    @property
    def is_supported(self) -> bool:
        return self is BackupFormat.ZIP


def format_from_magic(head: bytes) -> BackupFormat:
    """Classify the first bytes of a backup file."""
    if head.startswith(ZIP_MAGIC) or head.startswith(ZIP_EMPTY_MAGIC):
        return BackupFormat.ZIP
    if head.startswith(GZIP_MAGIC):
        return BackupFormat.GZ
    return BackupFormat.UNKNOWN


def detect_format(path: str | Path) -> BackupFormat:
    """Sniff the encoding of the backup file at ``path``.

    Returns:
        BackupFormat.UNKNOWN when the file cannot be read or is neither
        encoding.
    """
    try:
        with open(path, "rb") as f:
            head = f.read(4)
    except OSError as e:
        logger.warning(f"Cannot read backup file {path}: {e}")
        return BackupFormat.UNKNOWN

    fmt = format_from_magic(head)
    logger.debug("Detected backup format", extra={"path": str(path), "format": fmt.name})
    return fmt
