"""
Unit tests for the backup writer.

Tests cover:
- Header records built from the backup context
- Fixed header order
- Data member writing
- Failure semantics (no rollback)
"""

import json
import logging
from datetime import date

import pytest

from openbook.backup_archive import writer as writer_module
from openbook.backup_archive.container import ArchiveMember, InMemoryArchive
from openbook.backup_archive.context import BackupContext, DossierSnapshot, StaticBackupContext
from openbook.backup_archive.errors import ArchiveWriteError
from openbook.backup_archive.naming import header_name
from openbook.backup_archive.props import (
    HEADER_TITLES,
    BackupProperties,
    DbModelInfo,
    DossierProperties,
    OpenbookProperties,
    PluginInfo,
)
from openbook.backup_archive.writer import BackupWriter, build_openbook_props, write_backup


@pytest.fixture
def context():
    """Context of a connected session on a current exercice."""
    return StaticBackupContext(
        userid="alice",
        dossier=DossierSnapshot(
            is_current=True,
            begin_date=date(2024, 1, 1),
            end_date=date(2024, 12, 31),
            rpid="RP-42",
        ),
        extenders=[
            PluginInfo("openbook.recurrent", "Recurrent operations", "1.2"),
            PluginInfo("openbook.vat", "VAT declarations", "0.9"),
        ],
        dbmodels=[DbModelInfo("CORE", "47"), DbModelInfo("VAT", "3")],
    )


def member_text(archive, name):
    """Payload of a stored member, decoded."""
    for member in archive.members:
        if member.name == name:
            return bytes(member.data).decode("utf-8")
    raise KeyError(name)


class TestWriteHeaders:
    """Tests for BackupWriter.write_headers."""

    def test_static_context_is_a_backup_context(self, context):
        """StaticBackupContext satisfies the protocol."""
        assert isinstance(context, BackupContext)

    def test_headers_in_alphabetical_order(self, context):
        """The three headers are written sorted by title."""
        archive = InMemoryArchive()
        with archive.open_write() as handle:
            assert BackupWriter(handle).write_headers(context, "monthly close")

        assert archive.names == [
            "[HDR] BackupProps",
            "[HDR] DossierProps",
            "[HDR] OpenbookProps",
        ]

    def test_backup_props(self, context):
        """BackupProps records the user and the comment."""
        archive = InMemoryArchive()
        with archive.open_write() as handle:
            BackupWriter(handle).write_headers(context, "monthly close")

        props = BackupProperties.from_json(member_text(archive, "[HDR] BackupProps"))
        assert props.userid == "alice"
        assert props.comment == "monthly close"
        assert props.timestamp.microsecond == 0

    def test_no_comment(self, context):
        """A missing comment is written as an empty string."""
        archive = InMemoryArchive()
        with archive.open_write() as handle:
            BackupWriter(handle).write_headers(context)

        assert json.loads(member_text(archive, "[HDR] BackupProps"))["comment"] == ""

    def test_dossier_props(self, context):
        """DossierProps mirrors the dossier snapshot."""
        archive = InMemoryArchive()
        with archive.open_write() as handle:
            BackupWriter(handle).write_headers(context)

        props = DossierProperties.from_json(member_text(archive, "[HDR] DossierProps"))
        assert props == DossierProperties(True, date(2024, 1, 1), date(2024, 12, 31), "RP-42")

    def test_openbook_props(self, context):
        """OpenbookProps lists plugins and models in context order."""
        archive = InMemoryArchive()
        with archive.open_write() as handle:
            BackupWriter(handle).write_headers(context)

        props = OpenbookProperties.from_json(member_text(archive, "[HDR] OpenbookProps"))
        assert props == build_openbook_props(context)
        assert [p.canon_name for p in props.plugins] == ["openbook.recurrent", "openbook.vat"]
        assert [m.id for m in props.dbmodels] == ["CORE", "VAT"]

    def test_failure_stops_and_keeps_earlier_headers(self, context, caplog):
        """The first failing header stops the write; earlier ones remain."""
        archive = InMemoryArchive(fail_on="[HDR] DossierProps")

        with caplog.at_level(logging.ERROR):
            with archive.open_write() as handle:
                writer = BackupWriter(handle)
                assert not writer.write_headers(context)
                assert writer.last_error == "[HDR] DossierProps: simulated write failure"
                assert writer.failed_member == "[HDR] DossierProps"

        assert archive.names == ["[HDR] BackupProps", "[HDR] DossierProps"]
        assert "DossierProps" in caplog.text


class TestWriteData:
    """Tests for BackupWriter.write_data."""

    def test_bytes(self):
        """A whole payload is written under the data prefix."""
        archive = InMemoryArchive()
        with archive.open_write() as handle:
            assert BackupWriter(handle).write_data("entries", b"abc123")

        assert archive.names == ["[DAT] entries"]
        assert member_text(archive, "[DAT] entries") == "abc123"

    def test_chunks(self):
        """An iterable payload is streamed."""
        archive = InMemoryArchive()
        with archive.open_write() as handle:
            assert BackupWriter(handle).write_data("entries", (c for c in [b"abc", b"123"]))

        assert member_text(archive, "[DAT] entries") == "abc123"

    def test_failure_whole_payload(self):
        """A failed data member returns False."""
        archive = InMemoryArchive(fail_on="[DAT] entries")
        with archive.open_write() as handle:
            assert not BackupWriter(handle).write_data("entries", b"abc123")

    def test_failure_streamed(self):
        """A failed data member returns False and is named."""
        archive = InMemoryArchive(fail_on="[DAT] entries")
        with archive.open_write() as handle:
            writer = BackupWriter(handle)
            assert not writer.write_data("entries", iter([b"abc", b"123"]))
            assert writer.failed_member == "[DAT] entries"


class TestHeaderMembers:
    """Tests for BackupWriter.header_members."""

    def test_named_in_title_order(self, context):
        """Members follow HEADER_TITLES and carry the serialized record."""
        members = BackupWriter(InMemoryArchive().open_write()).header_members(context, None)

        assert [m.name for m in members] == [header_name(title) for title in HEADER_TITLES]
        assert all(isinstance(m, ArchiveMember) for m in members)
        assert DossierProperties.from_json(members[1].data).rpid == "RP-42"


class TestWriteBackup:
    """Tests for write_backup failure reporting."""

    @pytest.fixture
    def use_archive(self, monkeypatch):
        """Route write_backup to an in-memory archive."""

        def install(archive):
            monkeypatch.setattr(writer_module, "open_write", lambda path, config: archive.open_write())

        return install

    def test_header_failure_names_member(self, use_archive, context):
        """A failed header is reported with its member name."""
        use_archive(InMemoryArchive(fail_on="[HDR] DossierProps"))

        with pytest.raises(ArchiveWriteError) as exc_info:
            write_backup("dossier.zip", context, b"abc123")

        assert exc_info.value.member == "[HDR] DossierProps"
        assert exc_info.value.details["member"] == "[HDR] DossierProps"

    def test_data_failure_names_member(self, use_archive, context):
        """A failed data member is reported with its member name."""
        archive = InMemoryArchive(fail_on="[DAT] entries")
        use_archive(archive)

        with pytest.raises(ArchiveWriteError) as exc_info:
            write_backup("dossier.zip", context, b"abc123")

        assert exc_info.value.member == "[DAT] entries"
        assert archive.names[:3] == [header_name(title) for title in HEADER_TITLES]
