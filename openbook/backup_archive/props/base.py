"""
Serializable capability shared by all backup metadata records.

Every record stored as a "[HDR] <title>" member implements Serializable:
- title(): the stable on-disk identifier of the record type
- interface_version(): schema generation of the record (1 for all today)
- to_json(): flat JSON object text where every leaf is a string

JSON convention (must be reproduced exactly, older archives depend on it):
    - Absent optional fields are written as "" (never null, never omitted)
    - Booleans are written as "Y" / "N"
    - Dates are written as YYYYMMDD, timestamps as YYYY-MM-DD HH:MM:SS
    - Arrays hold objects whose members are strings (one nesting level)

Parsing pattern (shared by all records, see Serializable.from_json):
    1. Build a default instance
    2. Load the text; a malformed document or a non-object root raises
       PropsParseError
    3. Hand every root member to the record's _set_member()
    4. Unknown members and unexpected shapes become SchemaWarnings: they are
       logged and kept on the instance, parsing goes on

How to change safely:
    - New fields get new keys; never rename or drop an existing key
    - Bump interface_version() only when the meaning of a key changes
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterator, Mapping, TypeVar

from ..errors import PropsParseError

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y%m%d"
STAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_TRUE_WORDS = ("y", "yes", "true", "1")

P = TypeVar("P", bound="Serializable")


class PropsKind(Enum):
    """Closed set of metadata records, valued by their on-disk title."""

    BACKUP = "BackupProps"
    DOSSIER = "DossierProps"
    OPENBOOK = "OpenbookProps"


@dataclass(frozen=True)
class SchemaWarning:
    """Non-fatal diagnostic for content a parser did not understand.

    Attributes:
        title: Title of the record being parsed
        member: JSON member name (``array[index].sub`` for array elements)
        reason: What was unexpected about it
    """

    title: str
    member: str
    reason: str

    def __str__(self) -> str:
        return f"{self.title}: {self.member}: {self.reason}"


class Serializable(ABC):
    """Capability implemented by every header record.

    Concrete records are dataclasses carrying a ``schema_warnings`` list
    excluded from comparison.
    """

    schema_warnings: list[SchemaWarning]

    @classmethod
    def interface_version(cls) -> int:
        return 1

    @classmethod
    @abstractmethod
    def title(cls) -> str:
        """Stable title, used as "[HDR] <title>" member name."""
        ...

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Build the JSON object, every leaf already converted to text."""
        ...

    @abstractmethod
    def _set_member(self, key: str, value: Any) -> None:
        """Apply one root member of a parsed document."""
        ...

    def to_json(self) -> str:
        """Serialize as compact UTF-8 JSON text."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    def to_bytes(self) -> bytes:
        """Payload of the header member."""
        return self.to_json().encode("utf-8")

    @classmethod
    def from_json(cls: type[P], text: str | bytes) -> P:
        """Rebuild a record from its JSON text.

        Raises:
            PropsParseError: If the text is not JSON or its root is not an object
        """
        props = cls()
        root = load_object(text, cls.title())
        for key, value in root.items():
            props._set_member(key, value)
        return props

    def _warn(self, member: str, reason: str) -> None:
        warning = SchemaWarning(title=self.title(), member=member, reason=reason)
        self.schema_warnings.append(warning)
        logger.warning(
            f"Ignoring header content: {warning}",
            extra={"props_title": warning.title, "member": member, "reason": reason},
        )

    def _scalar(self, key: str, value: Any) -> str | None:
        """Text of a scalar member, or None (with a warning) for containers."""
        text = scalar_text(value)
        if text is None:
            self._warn(key, f"expected a string, got {type(value).__name__}")
        return text

    def _array_elements(
        self, key: str, value: Any, fields: tuple[str, ...]
    ) -> Iterator[dict[str, str]]:
        """Yield the known string fields of each object in an array member.

        Fields missing from an element come back as "". Non-object
        elements, unknown sub-members and non-scalar sub-values are
        skipped with a warning.
        """
        if not isinstance(value, list):
            self._warn(key, f"expected an array, got {type(value).__name__}")
            return

        for index, element in enumerate(value):
            where = f"{key}[{index}]"
            if not isinstance(element, dict):
                self._warn(where, f"expected an object, got {type(element).__name__}")
                continue

            found = dict.fromkeys(fields, "")
            for sub_key, sub_value in element.items():
                if sub_key not in found:
                    self._warn(f"{where}.{sub_key}", "unknown member")
                    continue
                text = self._scalar(f"{where}.{sub_key}", sub_value)
                if text is not None:
                    found[sub_key] = text
            yield found


def load_object(text: str | bytes, title: str) -> Mapping[str, Any]:
    """Load JSON text whose root must be an object.

    Raises:
        PropsParseError: If the text is not valid UTF-8 JSON or not an object
    """
    try:
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8")
        root = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PropsParseError(f"{title}: malformed JSON: {e}", title=title, reason=str(e))

    if not isinstance(root, dict):
        reason = f"root is {type(root).__name__}, expected an object"
        raise PropsParseError(f"{title}: {reason}", title=title, reason=reason)
    return root


def scalar_text(value: Any) -> str | None:
    """Text form of a JSON scalar; None for arrays and objects.

    Older writers only emit strings; numbers, booleans and null are
    accepted for robustness.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return bool_to_str(value)
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def bool_to_str(value: bool) -> str:
    return "Y" if value else "N"


def bool_from_str(text: str | None) -> bool:
    return bool(text) and text.strip().lower() in _TRUE_WORDS


def date_to_str(value: date | None) -> str:
    return value.strftime(DATE_FORMAT) if value else ""


def date_from_str(text: str | None) -> date | None:
    """Parse YYYYMMDD; None for empty or invalid text."""
    if not text or len(text) != 8 or not text.isdigit():
        return None
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        return None


def stamp_to_str(value: datetime) -> str:
    return value.strftime(STAMP_FORMAT)


def stamp_from_str(text: str | None) -> datetime | None:
    """Parse YYYY-MM-DD HH:MM:SS; None for empty or invalid text."""
    if not text:
        return None
    try:
        return datetime.strptime(text, STAMP_FORMAT)
    except ValueError:
        return None
