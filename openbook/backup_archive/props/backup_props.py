"""
BackupProps header: who took the backup, when, and why.

Wire format:
    {"comment": "<text>", "stamp": "YYYY-MM-DD HH:MM:SS", "userid": "<text>"}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .base import PropsKind, SchemaWarning, Serializable, stamp_from_str, stamp_to_str

KEY_COMMENT = "comment"
KEY_STAMP = "stamp"
KEY_USERID = "userid"


def _now() -> datetime:
    return datetime.now()


@dataclass
class BackupProperties(Serializable):
    """Properties of the backup operation itself.

    Attributes:
        comment: Free user comment, "" when none was given
        timestamp: Local time of the backup, whole seconds (defaults to now)
        userid: Account connected to the dossier when the backup was taken
    """

    comment: str = ""
    timestamp: datetime = field(default_factory=_now)
    userid: str = ""
    schema_warnings: list[SchemaWarning] = field(default_factory=list, compare=False, repr=False)

    def __post_init__(self) -> None:
        # the wire format has no sub-second precision
        self.comment = self.comment or ""
        self.userid = self.userid or ""
        self.timestamp = self.timestamp.replace(microsecond=0)

    @classmethod
    def title(cls) -> str:
        return PropsKind.BACKUP.value

    def to_dict(self) -> dict[str, Any]:
        return {
            KEY_COMMENT: self.comment,
            KEY_STAMP: stamp_to_str(self.timestamp),
            KEY_USERID: self.userid,
        }

    def _set_member(self, key: str, value: Any) -> None:
        if key not in (KEY_COMMENT, KEY_STAMP, KEY_USERID):
            self._warn(key, "unknown member")
            return

        text = self._scalar(key, value)
        if text is None:
            return

        if key == KEY_COMMENT:
            self.comment = text
        elif key == KEY_USERID:
            self.userid = text
        else:
            stamp = stamp_from_str(text)
            if stamp is None:
                self._warn(key, f"invalid timestamp '{text}'")
            else:
                self.timestamp = stamp
