"""
Member naming convention inside a backup archive.

Header members hold one serialized metadata record and are named
"[HDR] <title>". The data member holds the bulk payload and is named
"[DAT] <stream name>".

Invariants:
    - Names are built by plain concatenation, no escaping
    - Prefixes and titles are on-disk keys and never change
"""

from __future__ import annotations

HEADER_PREFIX = "[HDR] "
DATA_PREFIX = "[DAT] "


def header_prefix() -> str:
    return HEADER_PREFIX


def data_prefix() -> str:
    return DATA_PREFIX


def header_name(title: str) -> str:
    """Member name of the header holding the record titled ``title``."""
    return HEADER_PREFIX + title


def data_name(stream_name: str) -> str:
    """Member name of the data stream ``stream_name``."""
    return DATA_PREFIX + stream_name


def is_header_member(name: str) -> bool:
    return name.startswith(HEADER_PREFIX)


def is_data_member(name: str) -> bool:
    return name.startswith(DATA_PREFIX)


def title_from_header(name: str) -> str | None:
    """Inverse of header_name(); None if ``name`` is not a header member."""
    if not is_header_member(name):
        return None
    return name[len(HEADER_PREFIX):]
