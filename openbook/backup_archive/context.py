"""
Collaborators the backup writer draws header values from.

The writer does not know about database sessions or plugin loading. It
asks a BackupContext for:
- the account connected to the dossier (BackupProps.userid)
- a snapshot of the dossier exercice (DossierProps)
- loaded extension modules and installed schema models (OpenbookProps)

StaticBackupContext is a plain-value implementation, used by tests and by
callers that gathered these values beforehand.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Protocol, runtime_checkable

from .props.openbook_props import DbModelInfo, PluginInfo


@dataclass(frozen=True)
class DossierSnapshot:
    """State of the opened dossier exercice, as seen by the session."""

    is_current: bool = False
    begin_date: date | None = None
    end_date: date | None = None
    rpid: str = ""


@runtime_checkable
class BackupContext(Protocol):
    """Source of the values recorded in backup headers."""

    def get_userid(self) -> str:
        """Account connected to the dossier."""
        ...

    def get_dossier(self) -> DossierSnapshot:
        ...

    def get_extenders(self) -> Iterable[PluginInfo]:
        """Loaded extension modules, in load order."""
        ...

    def get_dbmodels(self) -> Iterable[DbModelInfo]:
        """Installed schema models, in registration order."""
        ...


@dataclass
class StaticBackupContext:
    """BackupContext over values known up front."""

    userid: str = ""
    dossier: DossierSnapshot = field(default_factory=DossierSnapshot)
    extenders: list[PluginInfo] = field(default_factory=list)
    dbmodels: list[DbModelInfo] = field(default_factory=list)

    def get_userid(self) -> str:
        return self.userid

    def get_dossier(self) -> DossierSnapshot:
        return self.dossier

    def get_extenders(self) -> Iterable[PluginInfo]:
        return list(self.extenders)

    def get_dbmodels(self) -> Iterable[DbModelInfo]:
        return list(self.dbmodels)
