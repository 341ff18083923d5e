"""
Backup reader: single-pass lookups inside a backup archive.

Each lookup scans the archive from the current cursor position:

    Scanning --(match)--> Streaming --(exhausted)--> Done
    Scanning --(end of archive)--> NotFound

Members that do not match are skipped without being buffered. The cursor
never moves backwards, so a second lookup on the same handle only sees the
members after the first match. Open a new handle to look again from the
start.

A missing header or data member is a normal negative result (None or
False), not an error.

How to change safely:
    - read_data() stops at the first data member; do not make it collect
      several without deciding how callers tell them apart
    - Keep header text decoding strict UTF-8, headers are written that way
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from .config import DEFAULT_CHUNK_SIZE
from .container import ArchiveEntry, ArchiveReader, open_read
from .errors import ArchiveReadError
from .naming import header_name, is_data_member
from .props import Serializable, props_from_json

logger = logging.getLogger(__name__)

# callback(chunk, length, user_data); chunk is released once the call returns
DataCallback = Callable[[memoryview, int, Any], None]


class BackupReader:
    """Looks up headers and the data member in an open archive.

    The archive handle belongs to the caller, who opens and closes it.

    Example:
        >>> with open_read("dossier.zip") as archive:
        ...     text = BackupReader(archive).read_header("BackupProps")
    """

    def __init__(self, archive: ArchiveReader, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.archive = archive
        self.chunk_size = chunk_size

    def read_header(self, title: str) -> str | None:
        """Return the JSON text of the header titled ``title``.

        Returns:
            The header text, or None if the scan reached the end without
            finding it

        Raises:
            ArchiveReadError: If the member is corrupt, truncated or not UTF-8
        """
        wanted = header_name(title)

        while (entry := self.archive.next_entry()) is not None:
            if entry.name != wanted:
                self.archive.skip_current()
                continue

            data = self.archive.read_exact(entry.size)
            if len(data) != entry.size:
                reason = f"read {len(data)} of {entry.size} bytes"
                raise ArchiveReadError(f"Header {wanted} is truncated: {reason}", member=wanted, reason=reason)
            try:
                return data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ArchiveReadError(f"Header {wanted} is not UTF-8: {e}", member=wanted, reason=str(e))

        logger.debug("Header not found", extra={"member": wanted})
        return None

    def read_props(self, title: str) -> Serializable | None:
        """Read and parse the header titled ``title``.

        Raises:
            PropsParseError: If the header is found but is not a JSON object
        """
        text = self.read_header(title)
        if text is None:
            return None
        return props_from_json(title, text)

    def read_data(self, callback: DataCallback, user_data: Any = None) -> bool:
        """Stream the first data member to ``callback``.

        The member is read in chunk_size pieces into one reused buffer.
        Each piece is passed as a memoryview that is released as soon as
        the callback returns: copy it (bytes(chunk)) to keep it.

        Returns:
            True if a data member was found, False otherwise
        """
        buffer = bytearray(self.chunk_size)

        while (entry := self.archive.next_entry()) is not None:
            if not is_data_member(entry.name):
                self.archive.skip_current()
                continue

            total = 0
            while (count := self.archive.readinto(buffer)) > 0:
                with memoryview(buffer)[:count] as chunk:
                    callback(chunk, count, user_data)
                total += count

            logger.debug("Streamed data member", extra={"member": entry.name, "size_bytes": total})
            return True

        logger.debug("No data member found")
        return False

    def list_members(self) -> list[ArchiveEntry]:
        """Walk the rest of the archive, returning every entry."""
        entries = []
        while (entry := self.archive.next_entry()) is not None:
            entries.append(entry)
            self.archive.skip_current()
        return entries


def read_header_from_path(path: str | Path, title: str) -> str | None:
    """Open ``path``, look up one header, close.

    Raises:
        ArchiveOpenError: If the archive cannot be opened
    """
    with open_read(path) as archive:
        return BackupReader(archive).read_header(title)


def read_props_from_path(path: str | Path, title: str) -> Serializable | None:
    with open_read(path) as archive:
        return BackupReader(archive).read_props(title)


def read_data_from_path(
    path: str | Path,
    callback: DataCallback,
    user_data: Any = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> bool:
    """Open ``path``, stream its data member, close."""
    with open_read(path) as archive:
        return BackupReader(archive, chunk_size=chunk_size).read_data(callback, user_data)


def list_members_from_path(path: str | Path) -> list[ArchiveEntry]:
    with open_read(path) as archive:
        return BackupReader(archive).list_members()
