"""
OpenbookProps header: the software environment that wrote the backup.

Wire format:
    {
        "openbook": "<application version>",
        "plugins": [{"canon": "...", "display": "...", "version": "..."}, ...],
        "dbms": [{"id": "...", "version": "..."}, ...]
    }

A restore compares these against the running environment to detect a
dossier written by a newer application or with schema models it lacks.

Invariants:
    - plugins and dbmodels keep insertion order through a write/read cycle
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .._version import __version__
from .base import PropsKind, SchemaWarning, Serializable

KEY_OPENBOOK = "openbook"
KEY_PLUGINS = "plugins"
KEY_DBMS = "dbms"
KEY_CANON = "canon"
KEY_DISPLAY = "display"
KEY_VERSION = "version"
KEY_ID = "id"


@dataclass(frozen=True)
class PluginInfo:
    """A loaded extension module."""

    canon_name: str = ""
    display_name: str = ""
    version: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            KEY_CANON: self.canon_name,
            KEY_DISPLAY: self.display_name,
            KEY_VERSION: self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> PluginInfo:
        return cls(
            canon_name=data.get(KEY_CANON, ""),
            display_name=data.get(KEY_DISPLAY, ""),
            version=data.get(KEY_VERSION, ""),
        )


@dataclass(frozen=True)
class DbModelInfo:
    """An installed database schema model and its current version."""

    id: str = ""
    version: str = ""

    def to_dict(self) -> dict[str, str]:
        return {KEY_ID: self.id, KEY_VERSION: self.version}

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> DbModelInfo:
        return cls(id=data.get(KEY_ID, ""), version=data.get(KEY_VERSION, ""))


@dataclass
class OpenbookProperties(Serializable):
    """Runtime environment at backup time.

    Attributes:
        app_version: Application version (defaults to this build)
        plugins: Loaded extension modules, in load order
        dbmodels: Installed schema models, in registration order
    """

    app_version: str = __version__
    plugins: list[PluginInfo] = field(default_factory=list)
    dbmodels: list[DbModelInfo] = field(default_factory=list)
    schema_warnings: list[SchemaWarning] = field(default_factory=list, compare=False, repr=False)

    @classmethod
    def title(cls) -> str:
        return PropsKind.OPENBOOK.value

    def add_plugin(self, canon_name: str, display_name: str, version: str) -> None:
        self.plugins.append(PluginInfo(canon_name or "", display_name or "", version or ""))

    def add_dbmodel(self, id: str, version: str) -> None:
        self.dbmodels.append(DbModelInfo(id or "", version or ""))

    def to_dict(self) -> dict[str, Any]:
        return {
            KEY_OPENBOOK: self.app_version,
            KEY_PLUGINS: [plugin.to_dict() for plugin in self.plugins],
            KEY_DBMS: [dbmodel.to_dict() for dbmodel in self.dbmodels],
        }

    def _set_member(self, key: str, value: Any) -> None:
        if key == KEY_OPENBOOK:
            text = self._scalar(key, value)
            if text is not None:
                self.app_version = text
        elif key == KEY_PLUGINS:
            fields = (KEY_CANON, KEY_DISPLAY, KEY_VERSION)
            for element in self._array_elements(key, value, fields):
                self.plugins.append(PluginInfo.from_dict(element))
        elif key == KEY_DBMS:
            for element in self._array_elements(key, value, (KEY_ID, KEY_VERSION)):
                self.dbmodels.append(DbModelInfo.from_dict(element))
        else:
            self._warn(key, "unknown member")
