"""
Error types for the backup archive core.

This module defines all exception types raised by the package:
- BackupArchiveError: Base exception
- ArchiveOpenError: Archive cannot be opened or created
- ArchiveWriteError: A member failed to write fully
- ArchiveReadError: Member data is truncated or corrupt
- PropsParseError: Header JSON is malformed or its root is not an object

A requested header or data member that is absent is NOT an error: readers
return None / False for it. Unknown JSON content is not an error either:
it is reported as a SchemaWarning (see props.base) and otherwise ignored.

Invariants:
    - All errors inherit from BackupArchiveError
    - Errors carry the underlying diagnostic text in details
    - Nothing in this package retries after an error
"""

from __future__ import annotations

from typing import Any


class BackupArchiveError(Exception):
    """Base exception for all backup archive errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "BACKUP_ARCHIVE_ERROR"
        self.details = details or {}


class ArchiveOpenError(BackupArchiveError):
    """Archive could not be opened for reading or created for writing.

    Raised when:
    - The path does not exist or is not readable/writable
    - The file is not a multi-member archive (including legacy GZ dumps)
    """

    def __init__(self, message: str, path: str | None = None, reason: str | None = None) -> None:
        super().__init__(
            message,
            code="ARCHIVE_OPEN_ERROR",
            details={"path": path, "reason": reason},
        )
        self.path = path
        self.reason = reason


class ArchiveWriteError(BackupArchiveError):
    """A member could not be written fully.

    Members written before the failure stay in the archive.
    """

    def __init__(self, message: str, member: str | None = None, reason: str | None = None) -> None:
        super().__init__(
            message,
            code="ARCHIVE_WRITE_ERROR",
            details={"member": member, "reason": reason},
        )
        self.member = member
        self.reason = reason


class PropsParseError(BackupArchiveError):
    """A header payload is not a JSON object."""

    def __init__(self, message: str, title: str | None = None, reason: str | None = None) -> None:
        super().__init__(
            message,
            code="PROPS_PARSE_ERROR",
            details={"title": title, "reason": reason},
        )
        self.title = title
        self.reason = reason


class ArchiveReadError(BackupArchiveError):
    """Member data could not be read back (truncated or corrupt archive)."""

    def __init__(self, message: str, member: str | None = None, reason: str | None = None) -> None:
        super().__init__(
            message,
            code="ARCHIVE_READ_ERROR",
            details={"member": member, "reason": reason},
        )
        self.member = member
        self.reason = reason
