"""
Title-based dispatch over the closed set of header records.

Readers always know which title they are looking for, so the parser is
chosen from that title, never by inspecting the payload.
"""

from __future__ import annotations

from .backup_props import BackupProperties
from .base import PropsKind, Serializable
from .dossier_props import DossierProperties
from .openbook_props import OpenbookProperties
from ..errors import PropsParseError

PROPS_TYPES: dict[PropsKind, type[Serializable]] = {
    PropsKind.BACKUP: BackupProperties,
    PropsKind.DOSSIER: DossierProperties,
    PropsKind.OPENBOOK: OpenbookProperties,
}

# Header write order, fixed (alphabetical by title) for deterministic archives
HEADER_TITLES: tuple[str, ...] = tuple(sorted(kind.value for kind in PropsKind))


def props_type(title: str) -> type[Serializable] | None:
    """Record class for ``title``, or None if the title is unknown."""
    try:
        return PROPS_TYPES[PropsKind(title)]
    except ValueError:
        return None


def props_from_json(title: str, text: str | bytes) -> Serializable:
    """Parse ``text`` with the parser registered for ``title``.

    Raises:
        PropsParseError: If the title is unknown or the text is not a JSON object
    """
    cls = props_type(title)
    if cls is None:
        raise PropsParseError(f"No parser for header title '{title}'", title=title, reason="unknown title")
    return cls.from_json(text)
