"""
Openbook backup archive - serialization core of dossier backups.

A backup is a single archive file holding:
- Metadata headers, one JSON record per "[HDR] <title>" member
  (BackupProps, DossierProps, OpenbookProps)
- One bulk data member "[DAT] <stream name>" produced by the caller

Layout:
    ┌──────────────┐     ┌──────────────┐     ┌──────────────────┐
    │ BackupContext│────▶│ BackupWriter │────▶│ ArchiveWriter    │
    │ (session)    │     │ headers+data │     │ (ZIP / memory)   │
    └──────────────┘     └──────────────┘     └────────┬─────────┘
                                                       │
                                                       ▼
                         ┌──────────────┐     ┌──────────────────┐
                         │ BackupReader │◀────│ ArchiveReader    │
                         │ single-pass  │     │ forward-only     │
                         └──────────────┘     └──────────────────┘

Invariants:
    - Member names are "[HDR] " or "[DAT] " followed by a title or stream
      name, with no escaping
    - Headers are compact UTF-8 JSON objects
    - Readers tolerate unknown header content and never fail on it
    - Reading is single-pass: one handle, one forward scan

How to change safely:
    - Titles, prefixes and JSON keys are on-disk format, never rename them
    - New header fields are added, old ones are never removed
"""

from ._version import __version__
from .errors import (
    ArchiveOpenError,
    ArchiveReadError,
    ArchiveWriteError,
    BackupArchiveError,
    PropsParseError,
)
from .formats import BackupFormat, detect_format
from .reader import BackupReader, read_data_from_path, read_header_from_path
from .writer import BackupWriter, write_backup

__all__ = [
    "__version__",
    "BackupFormat",
    "detect_format",
    "BackupReader",
    "BackupWriter",
    "read_data_from_path",
    "read_header_from_path",
    "write_backup",
    "BackupArchiveError",
    "ArchiveOpenError",
    "ArchiveReadError",
    "ArchiveWriteError",
    "PropsParseError",
]
