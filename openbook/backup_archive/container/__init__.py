"""
Archive container abstraction for backups.

This module provides a pluggable multi-member container supporting:
- ZIP files (the on-disk backup encoding)
- In-memory (for testing)

Invariants:
    - Reading is single-pass and forward-only
    - Writes never roll back members already written
    - Every opened handle is closed on every exit path (use ``with``)
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .base import ArchiveEntry, ArchiveMember, ArchiveReader, ArchiveWriter
from .memory import InMemoryArchive, InMemoryArchiveReader, InMemoryArchiveWriter
from .zip_archive import ZipArchiveReader, ZipArchiveWriter

if TYPE_CHECKING:
    from ..config import ArchiveConfig


def open_write(path: str | Path, config: ArchiveConfig | None = None) -> ZipArchiveWriter:
    """Create the archive at ``path`` for writing.

    Raises:
        ArchiveOpenError: If the file cannot be created
    """
    if config is None:
        return ZipArchiveWriter(path)
    return ZipArchiveWriter(path, compression=config.compression, compresslevel=config.compresslevel)


def open_read(path: str | Path) -> ZipArchiveReader:
    """Open the archive at ``path`` for a single forward pass.

    Raises:
        ArchiveOpenError: If the file cannot be opened as an archive
    """
    return ZipArchiveReader(path)


__all__ = [
    # Protocol and types
    "ArchiveReader",
    "ArchiveWriter",
    "ArchiveEntry",
    "ArchiveMember",
    # Factories
    "open_read",
    "open_write",
    # Implementations
    "ZipArchiveReader",
    "ZipArchiveWriter",
    "InMemoryArchive",
    "InMemoryArchiveReader",
    "InMemoryArchiveWriter",
]
