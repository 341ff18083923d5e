"""
In-memory archive container for testing.

This module provides a container backend that keeps members in a list:
- Unit tests of the backup writer and reader without touching disk
- Simulating a write failure part way through a member

Invariants:
    - Follows the same forward-only read contract as the ZIP backend
    - A simulated failure keeps the bytes written before it, like a real
      short write does

How to change safely:
    - This is test-only code, changes don't affect archives on disk
    - Keep behaviour compatible with ArchiveWriter / ArchiveReader
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from .base import MEMBER_MODE, ArchiveEntry

logger = logging.getLogger(__name__)


@dataclass
class StoredMember:
    """A member as held by InMemoryArchive."""

    name: str
    data: bytearray = field(default_factory=bytearray)
    mtime: datetime = field(default_factory=datetime.now)
    mode: int = MEMBER_MODE


class InMemoryArchive:
    """Archive container held in memory.

    Attributes:
        members: Stored members, in write order
        fail_on: Member name whose write fails after half of its bytes

    Example:
        >>> archive = InMemoryArchive()
        >>> with archive.open_write() as writer:
        ...     writer.write_member("[DAT] entries", b"abc123")
        >>> with archive.open_read() as reader:
        ...     entry = reader.next_entry()
    """

    def __init__(self, fail_on: str | None = None) -> None:
        self.members: list[StoredMember] = []
        self.fail_on = fail_on

    @property
    def names(self) -> list[str]:
        return [member.name for member in self.members]

    def open_write(self) -> InMemoryArchiveWriter:
        """Start a write session; existing members are discarded."""
        self.members.clear()
        return InMemoryArchiveWriter(self)

    def open_read(self) -> InMemoryArchiveReader:
        return InMemoryArchiveReader(self)


class InMemoryArchiveWriter:
    """Write handle on an InMemoryArchive."""

    def __init__(self, archive: InMemoryArchive) -> None:
        self._archive: InMemoryArchive | None = archive
        self._last_error: str | None = None

    def __enter__(self) -> InMemoryArchiveWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def last_error(self) -> str | None:
        return self._last_error

    def write_member(self, name: str, data: bytes) -> bool:
        return self.write_stream(name, [data])

    def write_stream(self, name: str, chunks: Iterable[bytes]) -> bool:
        archive = self._archive
        if archive is None:
            self._last_error = f"{name}: archive is closed"
            return False
        if name in archive.names:
            self._last_error = f"{name}: duplicate member name"
            return False

        member = StoredMember(name=name)
        archive.members.append(member)
        for chunk in chunks:
            if name == archive.fail_on:
                member.data.extend(chunk[: len(chunk) // 2])
                self._last_error = f"{name}: simulated write failure"
                logger.error(f"Failed to write archive member {name}: simulated write failure")
                return False
            member.data.extend(chunk)
        return True

    def close(self) -> None:
        self._archive = None


class InMemoryArchiveReader:
    """Forward-only read handle on an InMemoryArchive."""

    def __init__(self, archive: InMemoryArchive) -> None:
        self._archive: InMemoryArchive | None = archive
        self._index = -1
        self._offset = 0
        self._consumed = True

    def __enter__(self) -> InMemoryArchiveReader:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def next_entry(self) -> ArchiveEntry | None:
        archive = self._archive
        if archive is None or self._index >= len(archive.members):
            return None

        self._index += 1
        self._offset = 0
        if self._index >= len(archive.members):
            self._consumed = True
            return None

        self._consumed = False
        member = archive.members[self._index]
        return ArchiveEntry(
            name=member.name,
            size=len(member.data),
            mtime=member.mtime,
            mode=member.mode,
        )

    def _remaining(self) -> memoryview:
        if self._consumed or self._archive is None:
            return memoryview(b"")
        data = self._archive.members[self._index].data
        return memoryview(data)[self._offset:]

    def read_exact(self, count: int) -> bytes:
        chunk = bytes(self._remaining()[:count])
        self._offset += len(chunk)
        return chunk

    def readinto(self, buffer: bytearray | memoryview) -> int:
        remaining = self._remaining()
        count = min(len(buffer), len(remaining))
        buffer[:count] = remaining[:count]
        self._offset += count
        return count

    def skip_current(self) -> None:
        self._consumed = True

    def close(self) -> None:
        self._archive = None
