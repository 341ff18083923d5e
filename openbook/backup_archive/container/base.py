"""
Base protocols and types for the archive container abstraction.

The container is a single file holding several independently named byte
streams ("members"). This module defines what the backup writer and reader
need from it, so the ZIP file backend and the in-memory test backend are
interchangeable.

Write contract:
    - write_member() creates a regular-file entry (mode 0644, mtime now),
      writes the whole buffer and finalizes the entry
    - A failed write returns False and leaves earlier members in place

Read contract:
    - next_entry() advances a forward-only cursor, one member at a time
    - The current member's data is either consumed (read_exact/readinto)
      or discarded (skip_current); it cannot be read again on that handle
    - There is no rewind and no indexed access

Invariants:
    - Member names are unique within one write session
    - A handle is owned by whoever opened it and is always closed

How to change safely:
    - Protocol changes require updating every backend
    - Keep the cursor forward-only: callers rely on single-pass semantics
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Protocol, runtime_checkable

MEMBER_MODE = 0o644


@dataclass(frozen=True)
class ArchiveMember:
    """A named byte stream to be stored in an archive."""

    name: str
    data: bytes


@dataclass(frozen=True)
class ArchiveEntry:
    """Metadata of the member under the read cursor.

    Attributes:
        name: Member name ("[HDR] ..." or "[DAT] ...")
        size: Uncompressed size in bytes
        mtime: Modification time recorded at write time
        mode: Permission bits
    """

    name: str
    size: int
    mtime: datetime | None = None
    mode: int = MEMBER_MODE

    def __str__(self) -> str:
        return f"{self.name} ({self.size} bytes)"


@runtime_checkable
class ArchiveWriter(Protocol):
    """Write side of an archive container."""

    @abstractmethod
    def write_member(self, name: str, data: bytes) -> bool:
        """Store ``data`` as a new member called ``name``.

        Returns:
            True if the member was fully written, False otherwise (the
            reason is logged and kept in last_error)
        """
        ...

    @abstractmethod
    def write_stream(self, name: str, chunks: Iterable[bytes]) -> bool:
        """Store a member whose content is produced chunk by chunk."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Finalize the archive and release the underlying file."""
        ...

    @property
    @abstractmethod
    def last_error(self) -> str | None:
        """Diagnostic text of the last failed write, if any."""
        ...


@runtime_checkable
class ArchiveReader(Protocol):
    """Forward-only read side of an archive container."""

    @abstractmethod
    def next_entry(self) -> ArchiveEntry | None:
        """Move to the next member, discarding what is left of the current one.

        Returns:
            The new current entry, or None at end of archive
        """
        ...

    @abstractmethod
    def read_exact(self, count: int) -> bytes:
        """Read up to ``count`` bytes of the current member.

        Fewer bytes are returned only when the member ends.

        Raises:
            ArchiveReadError: If the member data is corrupt
        """
        ...

    @abstractmethod
    def readinto(self, buffer: bytearray | memoryview) -> int:
        """Fill ``buffer`` from the current member; 0 once exhausted."""
        ...

    @abstractmethod
    def skip_current(self) -> None:
        """Discard the rest of the current member."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the underlying file."""
        ...
