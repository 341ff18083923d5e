"""
ZIP file backend of the archive container.

This is the on-disk encoding identified as BackupFormat.ZIP. Every member
is a regular file entry with mode 0644 and the local time of the write.
Header members are small and written in one call; the data member may be
streamed chunk by chunk from its producer.

Reading walks the members in the order they were written. The cursor only
moves forward: a member's data stream is opened on first read and closed
for good when the cursor advances or the member is skipped.

Invariants:
    - Open failures raise ArchiveOpenError with the underlying diagnostic
    - Write failures return False and never remove earlier members
    - A legacy GZ dump is refused at open time, not misread

How to change safely:
    - Member names are stored as-is; never normalize or escape them
    - Test reading archives written by the previous release before
      changing compression defaults
"""

from __future__ import annotations

import logging
import stat
import time
import zipfile
import zlib
from datetime import datetime
from pathlib import Path
from typing import IO, Iterable, Iterator

from ..errors import ArchiveOpenError, ArchiveReadError
from ..formats import BackupFormat, detect_format
from .base import MEMBER_MODE, ArchiveEntry

logger = logging.getLogger(__name__)

COMPRESSION_METHODS = {
    "deflated": zipfile.ZIP_DEFLATED,
    "stored": zipfile.ZIP_STORED,
}


def _member_info(name: str, compress_type: int) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, date_time=time.localtime()[:6])
    info.external_attr = (stat.S_IFREG | MEMBER_MODE) << 16
    info.compress_type = compress_type
    return info


class ZipArchiveWriter:
    """Writes members into a new ZIP archive.

    Example:
        >>> with ZipArchiveWriter("dossier.zip") as archive:
        ...     archive.write_member("[HDR] BackupProps", props.to_bytes())
    """

    def __init__(
        self,
        path: str | Path,
        compression: str = "deflated",
        compresslevel: int | None = 6,
    ) -> None:
        """Create (or truncate) the archive at ``path``.

        Args:
            path: Target file
            compression: "deflated" or "stored"
            compresslevel: zlib level for deflated members

        Raises:
            ArchiveOpenError: If the file cannot be created
            ValueError: If the compression method is unknown
        """
        if compression not in COMPRESSION_METHODS:
            raise ValueError(f"Unknown compression '{compression}'. Must be one of: deflated, stored")

        self.path = Path(path)
        self._compress_type = COMPRESSION_METHODS[compression]
        self._compresslevel = compresslevel if compression == "deflated" else None
        self._names: set[str] = set()
        self._last_error: str | None = None

        try:
            self._zip: zipfile.ZipFile | None = zipfile.ZipFile(
                self.path, "w", compression=self._compress_type
            )
        except OSError as e:
            raise ArchiveOpenError(
                f"Cannot create archive {self.path}: {e}", path=str(self.path), reason=str(e)
            )

        logger.debug("Opened archive for writing", extra={"path": str(self.path)})

    def __enter__(self) -> ZipArchiveWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def member_names(self) -> list[str]:
        """Names written so far, in write order."""
        if self._zip is None:
            return []
        return self._zip.namelist()

    def _check_name(self, name: str) -> bool:
        if self._zip is None:
            self._fail(name, "archive is closed")
            return False
        if name in self._names:
            self._fail(name, "duplicate member name")
            return False
        return True

    def _fail(self, name: str, reason: str) -> None:
        self._last_error = f"{name}: {reason}"
        logger.error(
            f"Failed to write archive member {name}: {reason}",
            extra={"path": str(self.path), "member": name},
        )

    def write_member(self, name: str, data: bytes) -> bool:
        """Store ``data`` as member ``name``. See ArchiveWriter.write_member."""
        if not self._check_name(name):
            return False

        self._names.add(name)
        info = _member_info(name, self._compress_type)
        try:
            self._zip.writestr(info, data, compresslevel=self._compresslevel)
        except (OSError, ValueError, zipfile.LargeZipFile) as e:
            self._fail(name, str(e))
            return False

        logger.debug("Wrote archive member", extra={"member": name, "size_bytes": len(data)})
        return True

    def write_stream(self, name: str, chunks: Iterable[bytes]) -> bool:
        """Store a member fed from ``chunks``, without buffering it whole."""
        if not self._check_name(name):
            return False

        self._names.add(name)
        info = _member_info(name, self._compress_type)
        size = 0
        try:
            with self._zip.open(info, "w", force_zip64=True) as dest:
                for chunk in chunks:
                    dest.write(chunk)
                    size += len(chunk)
        except (OSError, ValueError) as e:
            self._fail(name, str(e))
            return False

        logger.debug("Wrote archive member", extra={"member": name, "size_bytes": size})
        return True

    def close(self) -> None:
        if self._zip is None:
            return
        try:
            self._zip.close()
        finally:
            self._zip = None
            logger.debug("Closed archive", extra={"path": str(self.path)})


class ZipArchiveReader:
    """Forward-only reader over the members of a ZIP archive.

    Example:
        >>> with ZipArchiveReader("dossier.zip") as archive:
        ...     while (entry := archive.next_entry()) is not None:
        ...         print(entry.name)
    """

    def __init__(self, path: str | Path) -> None:
        """Open the archive at ``path``.

        Raises:
            ArchiveOpenError: If the file is missing, unreadable, a legacy
                GZ dump or not a ZIP archive
        """
        self.path = Path(path)

        if detect_format(self.path) is BackupFormat.GZ:
            raise ArchiveOpenError(
                f"{self.path} is a legacy single-stream (GZ) backup",
                path=str(self.path),
                reason=f"format {BackupFormat.GZ.name}",
            )

        try:
            self._zip: zipfile.ZipFile | None = zipfile.ZipFile(self.path, "r")
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveOpenError(
                f"Cannot open archive {self.path}: {e}", path=str(self.path), reason=str(e)
            )

        self._infos: Iterator[zipfile.ZipInfo] = iter(self._zip.infolist())
        self._current: zipfile.ZipInfo | None = None
        self._stream: IO[bytes] | None = None
        self._consumed = False

        logger.debug("Opened archive for reading", extra={"path": str(self.path)})

    def __enter__(self) -> ZipArchiveReader:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def next_entry(self) -> ArchiveEntry | None:
        self._drop_stream()
        if self._zip is None:
            return None

        self._current = next(self._infos, None)
        self._consumed = False
        if self._current is None:
            return None

        info = self._current
        mode = (info.external_attr >> 16) & 0o777
        return ArchiveEntry(
            name=info.filename,
            size=info.file_size,
            mtime=datetime(*info.date_time),
            mode=mode or MEMBER_MODE,
        )

    def _open_stream(self) -> IO[bytes] | None:
        if self._current is None or self._consumed or self._zip is None:
            return None
        if self._stream is None:
            try:
                self._stream = self._zip.open(self._current, "r")
            except (OSError, zipfile.BadZipFile, NotImplementedError) as e:
                raise ArchiveReadError(
                    f"Cannot read member {self._current.filename}: {e}",
                    member=self._current.filename,
                    reason=str(e),
                )
        return self._stream

    def read_exact(self, count: int) -> bytes:
        stream = self._open_stream()
        if stream is None:
            return b""
        try:
            return stream.read(count)
        except (OSError, zipfile.BadZipFile, EOFError, zlib.error) as e:
            raise ArchiveReadError(
                f"Cannot read member {self._current.filename}: {e}",
                member=self._current.filename,
                reason=str(e),
            )

    def readinto(self, buffer: bytearray | memoryview) -> int:
        stream = self._open_stream()
        if stream is None:
            return 0
        try:
            return stream.readinto(buffer)
        except (OSError, zipfile.BadZipFile, EOFError, zlib.error) as e:
            raise ArchiveReadError(
                f"Cannot read member {self._current.filename}: {e}",
                member=self._current.filename,
                reason=str(e),
            )

    def skip_current(self) -> None:
        self._drop_stream()
        self._consumed = True

    def _drop_stream(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def close(self) -> None:
        if self._zip is None:
            return
        self._drop_stream()
        try:
            self._zip.close()
        finally:
            self._zip = None
            self._current = None
            logger.debug("Closed archive", extra={"path": str(self.path)})
