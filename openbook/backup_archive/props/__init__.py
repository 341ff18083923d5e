"""
Metadata records stored as "[HDR] <title>" members of a backup archive.

Invariants:
    - Titles are on-disk keys and never change
    - Parsing tolerates unknown content (SchemaWarning), never aborts on it
"""

from .backup_props import BackupProperties
from .base import PropsKind, SchemaWarning, Serializable
from .dossier_props import DossierProperties
from .openbook_props import DbModelInfo, OpenbookProperties, PluginInfo
from .registry import HEADER_TITLES, props_from_json, props_type

__all__ = [
    "Serializable",
    "SchemaWarning",
    "PropsKind",
    "BackupProperties",
    "DossierProperties",
    "OpenbookProperties",
    "PluginInfo",
    "DbModelInfo",
    "HEADER_TITLES",
    "props_from_json",
    "props_type",
]
