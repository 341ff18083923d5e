"""
DossierProps header: state of the exercice held by the backup.

Wire format:
    {"current": "Y|N", "begin": "YYYYMMDD", "end": "YYYYMMDD", "rpid": "<text>"}

Unset dates are written as "".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from .base import (
    PropsKind,
    SchemaWarning,
    Serializable,
    bool_from_str,
    bool_to_str,
    date_from_str,
    date_to_str,
)

KEY_CURRENT = "current"
KEY_BEGIN = "begin"
KEY_END = "end"
KEY_RPID = "rpid"


@dataclass
class DossierProperties(Serializable):
    """Snapshot of the dossier exercice at backup time.

    Attributes:
        is_current: Whether the exercice was the current (open) one
        begin_date: Beginning of the exercice, None if unset
        end_date: End of the exercice, None if unset
        rpid: Identifier of the exercice in the dossier settings, "" if unset
    """

    is_current: bool = False
    begin_date: date | None = None
    end_date: date | None = None
    rpid: str = ""
    schema_warnings: list[SchemaWarning] = field(default_factory=list, compare=False, repr=False)

    def __post_init__(self) -> None:
        self.rpid = self.rpid or ""

    @classmethod
    def title(cls) -> str:
        return PropsKind.DOSSIER.value

    def to_dict(self) -> dict[str, Any]:
        return {
            KEY_CURRENT: bool_to_str(self.is_current),
            KEY_BEGIN: date_to_str(self.begin_date),
            KEY_END: date_to_str(self.end_date),
            KEY_RPID: self.rpid,
        }

    def _set_member(self, key: str, value: Any) -> None:
        if key not in (KEY_CURRENT, KEY_BEGIN, KEY_END, KEY_RPID):
            self._warn(key, "unknown member")
            return

        text = self._scalar(key, value)
        if text is None:
            return

        if key == KEY_CURRENT:
            self.is_current = bool_from_str(text)
        elif key == KEY_RPID:
            self.rpid = text
        else:
            parsed = date_from_str(text)
            if text and parsed is None:
                self._warn(key, f"invalid date '{text}'")
            if key == KEY_BEGIN:
                self.begin_date = parsed
            else:
                self.end_date = parsed
