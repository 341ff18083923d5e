"""
Backup writer: stores the metadata headers and the data member.

A backup archive holds, in this order:
    [HDR] BackupProps     who, when, why
    [HDR] DossierProps    exercice state
    [HDR] OpenbookProps   application, plugins and schema models
    [DAT] <stream name>   bulk payload, produced by the caller

Header order carries no meaning for readers; it is fixed (alphabetical by
title) so that two backups of the same state are laid out identically.

Failure semantics:
    write_headers() stops at the first header that fails and returns False.
    Members written before the failure stay in the archive: there is no
    rollback. Callers that need all-or-nothing discard the whole file.

How to change safely:
    - New header records are appended to the registry, never renamed
    - Keep the data member last so that readers find headers first
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .config import ArchiveConfig
from .container import ArchiveMember, ArchiveWriter, open_write
from .context import BackupContext
from .errors import ArchiveWriteError
from .naming import data_name, header_name
from .props import (
    HEADER_TITLES,
    BackupProperties,
    DossierProperties,
    OpenbookProperties,
    Serializable,
)

logger = logging.getLogger(__name__)


def build_backup_props(context: BackupContext, comment: str | None) -> BackupProperties:
    return BackupProperties(comment=comment or "", userid=context.get_userid())


def build_dossier_props(context: BackupContext) -> DossierProperties:
    dossier = context.get_dossier()
    return DossierProperties(
        is_current=dossier.is_current,
        begin_date=dossier.begin_date,
        end_date=dossier.end_date,
        rpid=dossier.rpid,
    )


def build_openbook_props(context: BackupContext) -> OpenbookProperties:
    props = OpenbookProperties()
    for plugin in context.get_extenders():
        props.add_plugin(plugin.canon_name, plugin.display_name, plugin.version)
    for dbmodel in context.get_dbmodels():
        props.add_dbmodel(dbmodel.id, dbmodel.version)
    return props


class BackupWriter:
    """Writes backup members into an open archive.

    The archive handle belongs to the caller, who opens and closes it.

    Attributes:
        failed_member: Name of the member whose write failed, if any

    Example:
        >>> with open_write("dossier.zip") as archive:
        ...     writer = BackupWriter(archive)
        ...     if writer.write_headers(context, "monthly close"):
        ...         writer.write_data("entries", dump_bytes)
    """

    def __init__(self, archive: ArchiveWriter) -> None:
        self.archive = archive
        self.failed_member: str | None = None

    @property
    def last_error(self) -> str | None:
        return self.archive.last_error

    def build_headers(self, context: BackupContext, comment: str | None) -> list[Serializable]:
        """Header records in write order (HEADER_TITLES)."""
        records: list[Serializable] = [
            build_backup_props(context, comment),
            build_dossier_props(context),
            build_openbook_props(context),
        ]
        by_title = {props.title(): props for props in records}
        return [by_title[title] for title in HEADER_TITLES]

    def header_members(self, context: BackupContext, comment: str | None) -> list[ArchiveMember]:
        """Header members, named and serialized, in write order."""
        return [props_member(props) for props in self.build_headers(context, comment)]

    def write_member(self, member: ArchiveMember) -> bool:
        ok = self.archive.write_member(member.name, member.data)
        if ok:
            logger.debug("Wrote archive member", extra={"member": member.name})
        else:
            self.failed_member = member.name
        return ok

    def write_props(self, props: Serializable) -> bool:
        """Write one record as its "[HDR] <title>" member."""
        return self.write_member(props_member(props))

    def write_headers(self, context: BackupContext, comment: str | None = None) -> bool:
        """Write the three metadata headers.

        Args:
            context: Source of userid, dossier state, plugins and models
            comment: Optional user comment for BackupProps

        Returns:
            True if every header was written, False at the first failure
            (earlier headers stay in the archive, failed_member names it)
        """
        for member in self.header_members(context, comment):
            if not self.write_member(member):
                logger.error(
                    f"Backup header {member.name} not written: {self.last_error}",
                    extra={"member": member.name},
                )
                return False
        return True

    def write_data(self, stream_name: str, data: bytes | Iterable[bytes]) -> bool:
        """Write the payload as the "[DAT] <stream_name>" member.

        Args:
            stream_name: Logical name of the payload
            data: Whole payload, or an iterable of chunks
        """
        name = data_name(stream_name)
        if isinstance(data, (bytes, bytearray, memoryview)):
            return self.write_member(ArchiveMember(name, bytes(data)))

        ok = self.archive.write_stream(name, data)
        if not ok:
            self.failed_member = name
        return ok


def props_member(props: Serializable) -> ArchiveMember:
    """The "[HDR] <title>" member holding ``props``."""
    return ArchiveMember(name=header_name(props.title()), data=props.to_bytes())


def write_backup(
    path: str | Path,
    context: BackupContext,
    data: bytes | Iterable[bytes],
    comment: str | None = None,
    config: ArchiveConfig | None = None,
) -> None:
    """Write a complete backup archive at ``path``.

    The archive is always closed, including on failure. A failed backup
    leaves a partial file behind for the caller to discard.

    Raises:
        ArchiveOpenError: If the archive cannot be created
        ArchiveWriteError: If a header or the data member fails to write
    """
    config = config or ArchiveConfig()

    with open_write(path, config) as archive:
        writer = BackupWriter(archive)

        if not writer.write_headers(context, comment):
            raise ArchiveWriteError(
                f"Failed to write backup headers to {path}: {writer.last_error}",
                member=writer.failed_member,
                reason=writer.last_error,
            )

        if not writer.write_data(config.data_stream_name, data):
            raise ArchiveWriteError(
                f"Failed to write backup data to {path}: {writer.last_error}",
                member=writer.failed_member,
                reason=writer.last_error,
            )

    logger.info(
        "Backup written",
        extra={"path": str(path), "data_member": data_name(config.data_stream_name)},
    )
